import pytest

from kontainar.validation import NotFoundError


class TestUserLifecycle:
    def test_create_defaults(self, services, clock):
        created = services.users.create({
            "firstName": "Lina",
            "lastName": "Saad",
            "email": "lina@example.com",
            "status": "deleted",
        })

        assert created["status"] == "active"
        assert created["role"] == "user"
        assert created["permissions"] == []
        assert created["isEmailVerified"] is False
        assert created["twoFactorEnabled"] is False
        assert created["lastLogin"] is None
        assert created["joinDate"] <= created["createdAt"]

    def test_toggle_status_flips(self, seeded):
        users = seeded.users
        assert users.toggle_status("1")["status"] == "inactive"
        assert users.toggle_status("1")["status"] == "active"

    def test_toggle_deleted_user_reactivates(self, seeded):
        toggled = seeded.users.toggle_status("4")
        assert toggled["status"] == "active"
        assert toggled["deletedAt"] is None

    def test_toggle_missing_user(self, seeded):
        with pytest.raises(NotFoundError):
            seeded.users.toggle_status("missing")

    def test_soft_delete_restore_round_trip(self, seeded):
        users = seeded.users
        deleted = users.soft_delete("2")
        assert deleted["status"] == "deleted"
        assert deleted["deletedAt"]

        restored = users.restore("2")
        assert restored["status"] == "active"
        assert restored["deletedAt"] is None

    def test_permanent_delete(self, seeded):
        assert seeded.users.permanent_delete("3") is True
        assert seeded.users.get("3") is None
        assert seeded.users.permanent_delete("3") is True


class TestUserAccountFlags:
    def test_update_permissions_deduplicates(self, seeded):
        updated = seeded.users.update_permissions("3", ["read", "write", "read"])
        assert updated["permissions"] == ["read", "write"]

    def test_verification_and_two_factor(self, seeded):
        users = seeded.users
        assert users.verify_phone("2")["isPhoneVerified"] is True
        assert users.verify_email("2")["isEmailVerified"] is True
        assert users.toggle_two_factor("2")["twoFactorEnabled"] is True
        assert users.toggle_two_factor("2")["twoFactorEnabled"] is False

    def test_record_login_uses_clock(self, seeded):
        updated = seeded.users.record_login("3")
        assert updated["lastLogin"].endswith("Z")
        assert updated["lastLogin"] < updated["updatedAt"]


class TestUserQueries:
    def test_search(self, seeded):
        assert [u["id"] for u in seeded.users.search("sales")] == ["2"]
        assert [u["id"] for u in seeded.users.search("WILSON")] == ["4"]
        assert len(seeded.users.search("  ")) == 4

    def test_by_status_and_role(self, seeded):
        assert [u["id"] for u in seeded.users.by_status("inactive")] == ["3"]
        assert [u["id"] for u in seeded.users.by_role("user")] == ["3", "4"]

    def test_stats(self, seeded):
        stats = seeded.users.stats()
        assert stats == {
            "total": 4,
            "byStatus": {"active": 2, "inactive": 1, "deleted": 1},
            "active": 2,
            "inactive": 1,
            "deleted": 1,
            "admins": 1,
            "managers": 1,
            "users": 2,
        }
