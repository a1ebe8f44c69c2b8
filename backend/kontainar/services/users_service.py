# Overview: Service-layer operations for back-office user accounts.

"""
Users Service

Storage key: "all-users-data". New users are appended.

status: active | inactive | deleted
- toggle_status flips active <-> inactive (anything not active becomes active)
- soft_delete sets deleted + deletedAt; restore sets active and clears deletedAt
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..storage import KeyValueStorage
from .collection_store import CollectionStore, StatusSoftDelete
from .seed_data import default_users

USERS_KEY = "all-users-data"

USER_STATUSES = ("active", "inactive", "deleted")
USER_ROLES = ("admin", "manager", "user")

SEARCH_FIELDS = ("firstName", "lastName", "email", "phone", "department", "position")


class UsersService:
    def __init__(self, storage: KeyValueStorage, **store_options):
        self.store = CollectionStore(
            storage,
            USERS_KEY,
            seed=default_users,
            soft_delete=StatusSoftDelete("status"),
            entity_name="User",
            **store_options,
        )

    def initialize(self) -> None:
        self.store.initialize()

    def list_all(self) -> list[dict]:
        return self.store.load_all()

    def get(self, user_id: str) -> dict | None:
        return self.store.find_by_id(user_id)

    def create(self, data: Mapping[str, Any]) -> dict:
        now = self.store.clock()
        return self.store.create(
            data,
            defaults={"role": "user", "permissions": [], "avatar": None},
            overrides={
                "status": "active",
                "isEmailVerified": False,
                "isPhoneVerified": False,
                "twoFactorEnabled": False,
                "joinDate": now,
                "lastLogin": None,
            },
        )

    def update(self, user_id: str, patch: Mapping[str, Any]) -> dict:
        return self.store.update(user_id, patch)

    def soft_delete(self, user_id: str) -> dict:
        return self.store.soft_delete(user_id)

    def restore(self, user_id: str) -> dict:
        return self.store.restore(user_id)

    def permanent_delete(self, user_id: str) -> bool:
        return self.store.permanent_delete(user_id)

    def toggle_status(self, user_id: str) -> dict:
        def _toggle(user: dict) -> None:
            user["status"] = "inactive" if user.get("status") == "active" else "active"
            if user["status"] == "active":
                user["deletedAt"] = None
        return self.store.modify(user_id, _toggle)

    def search(self, query: str | None) -> list[dict]:
        return self.store.search(query, SEARCH_FIELDS)

    def by_status(self, status: str) -> list[dict]:
        return [u for u in self.store.load_all() if u.get("status") == status]

    def by_role(self, role: str) -> list[dict]:
        return [u for u in self.store.load_all() if u.get("role") == role]

    def update_permissions(self, user_id: str, permissions: Iterable[str]) -> dict:
        unique = list(dict.fromkeys(str(p) for p in permissions))
        return self.store.update(user_id, {"permissions": unique})

    def verify_email(self, user_id: str) -> dict:
        return self.store.update(user_id, {"isEmailVerified": True})

    def verify_phone(self, user_id: str) -> dict:
        return self.store.update(user_id, {"isPhoneVerified": True})

    def toggle_two_factor(self, user_id: str) -> dict:
        def _flip(user: dict) -> None:
            user["twoFactorEnabled"] = not user.get("twoFactorEnabled", False)
        return self.store.modify(user_id, _flip)

    def record_login(self, user_id: str) -> dict:
        return self.store.update(user_id, {"lastLogin": self.store.clock()})

    def stats(self) -> dict:
        users = self.store.load_all()
        generic = self.store.stats(group_field="role", records=users)
        by_status = generic["byStatus"]
        by_role = generic["byGroup"]
        return {
            "total": generic["total"],
            "byStatus": by_status,
            "active": by_status.get("active", 0),
            "inactive": by_status.get("inactive", 0),
            "deleted": by_status.get("deleted", 0),
            "admins": by_role.get("admin", 0),
            "managers": by_role.get("manager", 0),
            "users": by_role.get("user", 0),
        }
