# Overview: Service-layer operations for warehouse purchase orders.

"""
Purchases Service

Storage key: "warehouse_purchases". Orders are appended.

Purchase numbers: PO-YYYY-NNN, one past the highest sequence already used in
that year (so permanent deletes never cause a number to be reissued while a
higher one exists).

Totals:
- item.totalCost = quantity * unitCost (filled in when missing)
- subtotal = sum(item.totalCost); tax = subtotal * tax_rate; total = subtotal + tax
Totals are computed at creation. update() does NOT recompute them when items
change; call recalculate_totals() explicitly.
update() does not write status; update_status() does.
"""

from __future__ import annotations

import re
import uuid
from typing import Any, Mapping

from ..storage import KeyValueStorage
from ..time_utils import utcnow
from ..validation import ValidationError
from .collection_store import CollectionStore, FilterSpec, UniqueField, amount
from .concurrency import key_lock
from .seed_data import default_purchases

PURCHASES_KEY = "warehouse_purchases"

PURCHASE_STATUSES = ("pending", "ordered", "shipped", "delivered", "cancelled")
DEFAULT_TAX_RATE = 0.10

PURCHASE_NUMBER_RE = re.compile(r"^PO-(\d{4})-(\d+)$")

SEARCH_FIELDS = ("purchaseNumber", "supplierName", "items.productName")


def _money(value: float) -> int | float:
    value = round(value, 2)
    return int(value) if float(value).is_integer() else value


def normalize_items(items: list[Mapping[str, Any]]) -> list[dict]:
    normalized = []
    for item in items:
        line = dict(item)
        line.setdefault("id", str(uuid.uuid4()))
        if line.get("totalCost") is None:
            line["totalCost"] = _money(amount(line.get("quantity")) * amount(line.get("unitCost")))
        normalized.append(line)
    return normalized


def compute_totals(items: list[Mapping[str, Any]], tax_rate: float = DEFAULT_TAX_RATE) -> dict:
    subtotal = _money(sum(amount(item.get("totalCost")) for item in items))
    tax = _money(subtotal * tax_rate)
    return {"subtotal": subtotal, "tax": tax, "total": _money(subtotal + tax)}


def next_purchase_number(purchases: list[Mapping[str, Any]], year: int) -> str:
    highest = 0
    for purchase in purchases:
        match = PURCHASE_NUMBER_RE.match(str(purchase.get("purchaseNumber") or ""))
        if match and int(match.group(1)) == year:
            highest = max(highest, int(match.group(2)))
    return f"PO-{year}-{highest + 1:03d}"


class PurchasesService:
    def __init__(self, storage: KeyValueStorage, *, tax_rate: float = DEFAULT_TAX_RATE, **store_options):
        self.tax_rate = tax_rate
        self.store = CollectionStore(
            storage,
            PURCHASES_KEY,
            seed=default_purchases,
            unique_fields=(UniqueField("purchaseNumber", label="Purchase number"),),
            entity_name="Purchase order",
            **store_options,
        )

    def initialize(self) -> None:
        self.store.initialize()

    def list_all(self) -> list[dict]:
        return self.store.load_all()

    def get(self, purchase_id: str) -> dict | None:
        return self.store.find_by_id(purchase_id)

    def create(self, data: Mapping[str, Any]) -> dict:
        data = dict(data)
        status = data.get("status") or "pending"
        if status not in PURCHASE_STATUSES:
            raise ValidationError(f"Invalid purchase status: {status}")
        items = normalize_items(data.pop("items", None) or [])
        data["status"] = status
        data["items"] = items
        data.update(compute_totals(items, self.tax_rate))
        # Number assignment and insert share one critical section.
        with key_lock(self.store.key):
            if not data.get("purchaseNumber"):
                data["purchaseNumber"] = next_purchase_number(self.store.load_all(), utcnow().year)
            return self.store.create(data, defaults={"notes": ""})

    def update(self, purchase_id: str, patch: Mapping[str, Any]) -> dict:
        patch = dict(patch)
        if "status" in patch:
            raise ValidationError("Purchase status changes go through update_status")
        if "items" in patch and patch["items"] is not None:
            patch["items"] = normalize_items(patch["items"])
        return self.store.update(purchase_id, patch)

    def recalculate_totals(self, purchase_id: str) -> dict:
        def _recalc(purchase: dict) -> None:
            purchase["items"] = normalize_items(purchase.get("items") or [])
            for item in purchase["items"]:
                item["totalCost"] = _money(amount(item.get("quantity")) * amount(item.get("unitCost")))
            purchase.update(compute_totals(purchase["items"], self.tax_rate))
        return self.store.modify(purchase_id, _recalc)

    def update_status(self, purchase_id: str, status: str, delivered_date: str | None = None) -> tuple[dict, str | None]:
        """
        Write a new status. Returns (updated purchase, previous status).

        Use WarehouseService.update_purchase_status for the delivery workflow.
        """
        if status not in PURCHASE_STATUSES:
            raise ValidationError(f"Invalid purchase status: {status}")
        previous: list[str | None] = []

        def _set(purchase: dict) -> None:
            previous.append(purchase.get("status"))
            purchase["status"] = status
            if delivered_date:
                purchase["deliveredDate"] = delivered_date

        updated = self.store.modify(purchase_id, _set)
        return updated, previous[0]

    def permanent_delete(self, purchase_id: str) -> bool:
        return self.store.permanent_delete(purchase_id)

    def search(self, query: str | None, records=None) -> list[dict]:
        return self.store.search(query, SEARCH_FIELDS, records)

    def filter(self, filters: Mapping[str, Any]) -> list[dict]:
        """
        Recognized keys: status, supplierId, search,
        sortBy (newest, oldest, amount-high, amount-low, supplier).
        """
        spec = FilterSpec(
            equals={"status": filters.get("status"), "supplierId": filters.get("supplierId")},
            sort_by=filters.get("sortBy"),
        )
        purchases = self.search(filters.get("search"))
        return self.store.filter_by(spec, purchases)
