# Overview: Service-layer operations for marketplace sellers.

"""
Sellers Service

Storage key: "sellers". New sellers are appended.

Uniqueness:
- email (case-insensitive)
- sellerId (exact)
Both are checked on create and on update, excluding the seller being updated.

status: active | pending | suspended | deleted
Nested objects (address, bankAccount, storeSettings, socialMedia) are plain
mappings; an update replaces them wholesale.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..storage import KeyValueStorage
from ..time_utils import utcnow
from ..validation import NotFoundError, ValidationError
from .collection_store import CollectionStore, StatusSoftDelete, UniqueField, amount
from .seed_data import default_sellers

SELLERS_KEY = "sellers"

SELLER_STATUSES = ("active", "pending", "suspended", "deleted")
VERIFICATION_STATUSES = ("pending", "verified", "rejected")

SEARCH_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "sellerId",
    "businessName",
    "businessType",
    "tags",
)


class SellersService:
    def __init__(self, storage: KeyValueStorage, **store_options):
        self.store = CollectionStore(
            storage,
            SELLERS_KEY,
            seed=default_sellers,
            unique_fields=(
                UniqueField("email", case_insensitive=True, label="Seller email"),
                UniqueField("sellerId", label="Seller ID"),
            ),
            soft_delete=StatusSoftDelete("status"),
            entity_name="Seller",
            **store_options,
        )

    def initialize(self) -> None:
        self.store.initialize()

    # -- listing ---------------------------------------------------------

    def list_all(self) -> list[dict]:
        return self.store.load_all()

    def by_status(self, status: str) -> list[dict]:
        return [s for s in self.store.load_all() if s.get("status") == status]

    def list_active(self) -> list[dict]:
        return self.by_status("active")

    def get(self, seller_pk: str) -> dict | None:
        return self.store.find_by_id(seller_pk)

    def get_by_email(self, email: str) -> dict | None:
        return self.store.find_by("email", email, case_insensitive=True)

    def get_by_seller_id(self, seller_id: str) -> dict | None:
        return self.store.find_by("sellerId", seller_id)

    # -- mutation --------------------------------------------------------

    def create(self, data: Mapping[str, Any]) -> dict:
        data = {k: v for k, v in data.items() if v is not None}
        if not data.get("commissionRate"):
            data.pop("commissionRate", None)
        return self.store.create(
            data,
            defaults={
                "status": "pending",
                "verificationStatus": "pending",
                "commissionRate": 10,
                "documents": [],
                "tags": [],
                "notes": "",
            },
            overrides={
                "totalSales": 0,
                "totalOrders": 0,
                "rating": 0,
                "totalReviews": 0,
                "lastLogin": None,
                "joinDate": utcnow().date().isoformat(),
                "isSystem": False,
            },
        )

    def update(self, seller_pk: str, patch: Mapping[str, Any]) -> dict:
        return self.store.update(seller_pk, patch)

    def soft_delete(self, seller_pk: str) -> dict:
        return self.store.soft_delete(seller_pk)

    def restore(self, seller_pk: str) -> dict:
        return self.store.restore(seller_pk)

    def permanent_delete(self, seller_pk: str) -> bool:
        # Unlike the generic store, removing an unknown seller is reported.
        if self.store.find_by_id(seller_pk) is None:
            raise NotFoundError("Seller not found")
        return self.store.permanent_delete(seller_pk)

    def set_status(self, seller_pk: str, status: str) -> dict:
        if status not in SELLER_STATUSES or status == "deleted":
            raise ValidationError(f"Invalid seller status: {status}")
        return self.store.update(seller_pk, {"status": status})

    def record_sale(self, seller_pk: str, order_amount: float) -> dict:
        """Count one more order and add its amount to the seller's totals."""
        if isinstance(order_amount, bool) or not isinstance(order_amount, (int, float)):
            raise ValidationError("amount must be a number")
        if order_amount < 0:
            raise ValidationError("amount must be >= 0")

        def _bump(seller: dict) -> None:
            seller["totalOrders"] = amount(seller.get("totalOrders")) + 1
            seller["totalSales"] = amount(seller.get("totalSales")) + order_amount
            seller["lastLogin"] = self.store.clock()

        return self.store.modify(seller_pk, _bump)

    # -- query -----------------------------------------------------------

    def search(self, query: str | None) -> list[dict]:
        return self.store.search(query, SEARCH_FIELDS)

    def business_types(self) -> list[str]:
        return sorted({s.get("businessType") for s in self.list_active() if s.get("businessType")})

    def tags(self) -> list[str]:
        return sorted({t for s in self.list_active() for t in s.get("tags") or []})

    def by_business_type(self, business_type: str) -> list[dict]:
        return [s for s in self.list_active() if s.get("businessType") == business_type]

    def stats(self) -> dict:
        sellers = self.store.load_all()
        generic = self.store.stats(
            group_field="businessType",
            sum_fields=("totalSales", "totalOrders"),
            average_fields=("rating",),
            include=lambda s: s.get("status") == "active",
            records=sellers,
        )
        by_status = generic["byStatus"]
        return {
            "total": generic["total"],
            "byStatus": by_status,
            "active": by_status.get("active", 0),
            "pending": by_status.get("pending", 0),
            "suspended": by_status.get("suspended", 0),
            "deleted": by_status.get("deleted", 0),
            "verified": sum(1 for s in sellers if s.get("verificationStatus") == "verified"),
            "businessTypes": len(generic["byGroup"]),
            "businessTypeStats": generic["byGroup"],
            "totalSales": generic["sums"]["totalSales"],
            "totalOrders": generic["sums"]["totalOrders"],
            "averageRating": generic["averages"]["rating"],
        }
