# Overview: Service-layer operations for warehouse suppliers.

from __future__ import annotations

from typing import Any, Mapping

from ..storage import KeyValueStorage
from .collection_store import CollectionStore, FilterSpec, StatusSoftDelete, UniqueField
from .seed_data import default_suppliers

SUPPLIERS_KEY = "warehouse_suppliers"

SUPPLIER_STATUSES = ("active", "inactive", "deleted")

SEARCH_FIELDS = ("name", "contactPerson", "email", "phone", "category")


class SuppliersService:
    """Suppliers are appended; names are unique regardless of case."""

    def __init__(self, storage: KeyValueStorage, **store_options):
        self.store = CollectionStore(
            storage,
            SUPPLIERS_KEY,
            seed=default_suppliers,
            unique_fields=(UniqueField("name", case_insensitive=True, label="Supplier name"),),
            soft_delete=StatusSoftDelete("status"),
            entity_name="Supplier",
            **store_options,
        )

    def initialize(self) -> None:
        self.store.initialize()

    def list_all(self) -> list[dict]:
        return self.store.load_all()

    def get(self, supplier_id: str) -> dict | None:
        return self.store.find_by_id(supplier_id)

    def create(self, data: Mapping[str, Any]) -> dict:
        return self.store.create(data, defaults={"status": "active"})

    def update(self, supplier_id: str, patch: Mapping[str, Any]) -> dict:
        return self.store.update(supplier_id, patch)

    def soft_delete(self, supplier_id: str) -> dict:
        return self.store.soft_delete(supplier_id)

    def restore(self, supplier_id: str) -> dict:
        return self.store.restore(supplier_id)

    def permanent_delete(self, supplier_id: str) -> bool:
        return self.store.permanent_delete(supplier_id)

    def search(self, query: str | None, records=None) -> list[dict]:
        return self.store.search(query, SEARCH_FIELDS, records)

    def filter(self, filters: Mapping[str, Any]) -> list[dict]:
        """Recognized keys: status, category, search, sortBy (newest, oldest, name)."""
        spec = FilterSpec(
            equals={"status": filters.get("status"), "category": filters.get("category")},
            sort_by=filters.get("sortBy"),
        )
        return self.store.filter_by(spec, self.search(filters.get("search")))
