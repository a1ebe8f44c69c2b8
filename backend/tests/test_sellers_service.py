import pytest

from kontainar.validation import DuplicateKeyError, NotFoundError, ValidationError


def new_seller(**overrides):
    seller = {
        "firstName": "Hana",
        "lastName": "Kamal",
        "email": "hana@seller.com",
        "sellerId": "SELL100",
        "businessName": "Hana Crafts",
        "businessType": "crafts",
    }
    seller.update(overrides)
    return seller


class TestSellerCreate:
    def test_defaults(self, seeded):
        created = seeded.sellers.create(new_seller(commissionRate=0, totalSales=999, status=None))

        assert created["status"] == "pending"
        assert created["verificationStatus"] == "pending"
        assert created["commissionRate"] == 10
        assert created["totalSales"] == 0
        assert created["totalOrders"] == 0
        assert created["isSystem"] is False
        assert len(created["joinDate"]) == 10

    def test_duplicate_email_is_case_insensitive(self, seeded):
        with pytest.raises(DuplicateKeyError) as excinfo:
            seeded.sellers.create(new_seller(email="AHMED.HASSAN@seller.com"))
        assert excinfo.value.field_name == "email"
        assert len(seeded.sellers.list_all()) == 5

    def test_duplicate_seller_id(self, seeded):
        with pytest.raises(DuplicateKeyError) as excinfo:
            seeded.sellers.create(new_seller(sellerId="SELL001"))
        assert excinfo.value.field_name == "sellerId"


class TestSellerUpdate:
    def test_update_to_taken_email(self, seeded):
        with pytest.raises(DuplicateKeyError):
            seeded.sellers.update("2", {"email": "ahmed.hassan@SELLER.com"})

    def test_update_own_email_case(self, seeded):
        updated = seeded.sellers.update("1", {"email": "Ahmed.Hassan@seller.com"})
        assert updated["email"] == "Ahmed.Hassan@seller.com"

    def test_set_status(self, seeded):
        assert seeded.sellers.set_status("3", "active")["status"] == "active"
        with pytest.raises(ValidationError):
            seeded.sellers.set_status("3", "deleted")
        with pytest.raises(ValidationError):
            seeded.sellers.set_status("3", "closed")

    def test_record_sale(self, seeded):
        updated = seeded.sellers.record_sale("1", 500)
        assert updated["totalSales"] == 150500
        assert updated["totalOrders"] == 251
        assert updated["lastLogin"]

    def test_record_sale_rejects_bad_amounts(self, seeded):
        with pytest.raises(ValidationError):
            seeded.sellers.record_sale("1", -1)
        with pytest.raises(ValidationError):
            seeded.sellers.record_sale("1", "100")


class TestSellerDelete:
    def test_soft_delete_restore_round_trip(self, seeded):
        deleted = seeded.sellers.soft_delete("5")
        assert deleted["status"] == "deleted"
        restored = seeded.sellers.restore("5")
        assert restored["status"] == "active"
        assert restored["deletedAt"] is None

    def test_permanent_delete_reports_missing(self, seeded):
        assert seeded.sellers.permanent_delete("2") is True
        with pytest.raises(NotFoundError):
            seeded.sellers.permanent_delete("2")


class TestSellerQueries:
    def test_lookup(self, seeded):
        assert seeded.sellers.get_by_email("FATMA.ALI@seller.com")["id"] == "2"
        assert seeded.sellers.get_by_seller_id("SELL004")["id"] == "4"
        assert seeded.sellers.get_by_seller_id("sell004") is None

    def test_search_matches_tags(self, seeded):
        assert [s["id"] for s in seeded.sellers.search("top seller")] == ["1", "4"]

    def test_business_types_and_tags(self, seeded):
        assert seeded.sellers.business_types() == ["beauty", "electronics", "fashion"]
        assert "Suspended" not in seeded.sellers.tags()
        assert [s["id"] for s in seeded.sellers.by_business_type("beauty")] == ["4"]

    def test_stats(self, seeded):
        stats = seeded.sellers.stats()

        assert stats["total"] == 5
        assert sum(stats["byStatus"].values()) == stats["total"]
        assert (stats["active"], stats["pending"], stats["suspended"], stats["deleted"]) == (3, 1, 1, 0)
        assert stats["verified"] == 4
        assert stats["businessTypes"] == 3
        assert stats["businessTypeStats"] == {"electronics": 1, "fashion": 1, "beauty": 1}
        assert stats["totalSales"] == 365000
        assert stats["totalOrders"] == 630
        assert stats["averageRating"] == pytest.approx((4.8 + 4.6 + 4.9) / 3)
