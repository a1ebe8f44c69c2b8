# Overview: Service-layer operations for warehouse inventory items.

"""
Inventory Service

Storage key: "warehouse_inventory". Items are appended; sku is unique
(case-insensitive).

Stock invariants:
- currentStock never goes below 0. "subtract" and "set" clamp at 0.
- Every stock change stamps lastUpdated and updatedAt.

Stock levels used by filters and stats:
- low:  currentStock <= minStock
- out:  currentStock == 0
- high: currentStock >= 80% of maxStock
"""

from __future__ import annotations

from typing import Any, Mapping

from ..storage import KeyValueStorage
from ..validation import ValidationError
from .collection_store import CollectionStore, FilterSpec, StatusSoftDelete, UniqueField, amount
from .seed_data import default_inventory

INVENTORY_KEY = "warehouse_inventory"

STOCK_OPERATIONS = ("add", "subtract", "set")
HIGH_STOCK_RATIO = 0.8

SEARCH_FIELDS = ("productName", "sku", "category", "location")


def is_low_stock(item: Mapping[str, Any]) -> bool:
    return amount(item.get("currentStock")) <= amount(item.get("minStock"))


def is_out_of_stock(item: Mapping[str, Any]) -> bool:
    return amount(item.get("currentStock")) == 0


def is_high_stock(item: Mapping[str, Any]) -> bool:
    return amount(item.get("currentStock")) >= amount(item.get("maxStock")) * HIGH_STOCK_RATIO


STOCK_LEVELS = {
    "low": is_low_stock,
    "out": is_out_of_stock,
    "high": is_high_stock,
}


def apply_stock_operation(current: Any, quantity: Any, operation: str = "set") -> int | float:
    current = amount(current)
    if operation == "add":
        return max(0, current + quantity)
    if operation == "subtract":
        return max(0, current - quantity)
    if operation == "set":
        return max(0, quantity)
    raise ValidationError(f"Unknown stock operation: {operation}")


class InventoryService:
    def __init__(self, storage: KeyValueStorage, **store_options):
        self.store = CollectionStore(
            storage,
            INVENTORY_KEY,
            seed=default_inventory,
            unique_fields=(UniqueField("sku", case_insensitive=True, label="SKU"),),
            soft_delete=StatusSoftDelete("status"),
            entity_name="Inventory item",
            **store_options,
        )

    def initialize(self) -> None:
        self.store.initialize()

    def list_all(self) -> list[dict]:
        return self.store.load_all()

    def get(self, item_id: str) -> dict | None:
        return self.store.find_by_id(item_id)

    def create(self, data: Mapping[str, Any]) -> dict:
        return self.store.create(
            data,
            defaults={"status": "active", "currentStock": 0, "minStock": 0, "maxStock": 0, "unitCost": 0},
            overrides={"lastUpdated": self.store.clock()},
        )

    def update(self, item_id: str, patch: Mapping[str, Any]) -> dict:
        patch = dict(patch)
        patch["lastUpdated"] = self.store.clock()
        return self.store.update(item_id, patch)

    def update_stock(self, item_id: str, quantity: int | float, operation: str = "set") -> dict:
        """
        Change currentStock.

        operation:
        - "add": currentStock + quantity, clamped at 0
        - "subtract": currentStock - quantity, clamped at 0
        - "set": quantity, clamped at 0 (default)
        """
        if operation not in STOCK_OPERATIONS:
            raise ValidationError(f"Unknown stock operation: {operation}")
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
            raise ValidationError("quantity must be a number")

        def _apply(item: dict) -> None:
            item["currentStock"] = apply_stock_operation(item.get("currentStock"), quantity, operation)
            item["lastUpdated"] = self.store.clock()

        return self.store.modify(item_id, _apply)

    def receive_by_sku(self, quantities: Mapping[str, int | float]) -> tuple[list[str], list[str]]:
        """
        Add received quantities to the items whose sku matches exactly.

        Returns (updated item ids, skus with no inventory match). Persists once.
        """
        unmatched: list[str] = []

        def _receive(items: list[dict]) -> list[str]:
            by_sku = {item.get("sku"): item for item in items}
            changed = []
            stamp = self.store.clock()
            for sku, quantity in quantities.items():
                item = by_sku.get(sku)
                if item is None:
                    unmatched.append(sku)
                    continue
                item["currentStock"] = amount(item.get("currentStock")) + quantity
                item["lastUpdated"] = stamp
                changed.append(item["id"])
            return changed

        updated = self.store.modify_many(_receive)
        return updated, unmatched

    def soft_delete(self, item_id: str) -> dict:
        return self.store.soft_delete(item_id)

    def restore(self, item_id: str) -> dict:
        return self.store.restore(item_id)

    def permanent_delete(self, item_id: str) -> bool:
        return self.store.permanent_delete(item_id)

    def search(self, query: str | None, records=None) -> list[dict]:
        return self.store.search(query, SEARCH_FIELDS, records)

    def filter(self, filters: Mapping[str, Any]) -> list[dict]:
        """
        Recognized keys: category, supplierId, status, stockLevel (low/out/high),
        search, sortBy (newest, oldest, name, stock-low, stock-high, value-high).
        """
        level = STOCK_LEVELS.get(filters.get("stockLevel") or "")
        spec = FilterSpec(
            equals={
                "category": filters.get("category"),
                "supplierId": filters.get("supplierId"),
                "status": filters.get("status"),
            },
            predicate=level,
            sort_by=filters.get("sortBy"),
        )
        items = self.search(filters.get("search"))
        return self.store.filter_by(spec, items)

    def low_stock(self) -> list[dict]:
        return [item for item in self.store.load_all() if is_low_stock(item)]
