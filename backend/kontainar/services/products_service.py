# Overview: Service-layer operations for the product catalog.

"""
Products Service

Storage key: "Kontainar-products". New products are prepended (newest first).

Soft delete uses the isActive/isDeleted pair:
- active:   isActive=True,  isDeleted=False
- inactive: isActive=False, isDeleted=False
- deleted:  isActive=False, isDeleted=True (deletedAt stamped)

salesPrice is derived: price * (1 - discount / 100), recomputed whenever
price or discount is written.
"""

from __future__ import annotations

import uuid
from typing import Any, Mapping

from ..storage import KeyValueStorage
from .collection_store import CollectionStore, FilterSpec, FlagPairSoftDelete, amount
from .seed_data import default_products

PRODUCTS_KEY = "Kontainar-products"

SEARCH_FIELDS = ("title", "description", "brand", "category", "tags")


def sales_price(price: Any, discount: Any) -> float | int:
    price = amount(price)
    discount = amount(discount)
    value = round(price * (1 - discount / 100), 2)
    return int(value) if float(value).is_integer() else value


def new_product_id() -> str:
    return f"PROD-{uuid.uuid4().hex[:12].upper()}"


def _distinct(values) -> list:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


class ProductsService:
    def __init__(self, storage: KeyValueStorage, **store_options):
        self.store = CollectionStore(
            storage,
            PRODUCTS_KEY,
            seed=default_products,
            prepend=True,
            soft_delete=FlagPairSoftDelete(),
            id_factory=new_product_id,
            entity_name="Product",
            **store_options,
        )

    def initialize(self) -> None:
        self.store.initialize()

    # -- listing ---------------------------------------------------------

    @staticmethod
    def is_visible(product: Mapping[str, Any]) -> bool:
        return bool(product.get("isActive")) and not product.get("isDeleted")

    def list_active(self) -> list[dict]:
        return [p for p in self.store.load_all() if self.is_visible(p)]

    def list_all(self) -> list[dict]:
        return self.store.load_all()

    def list_deleted(self) -> list[dict]:
        return [p for p in self.store.load_all() if p.get("isDeleted")]

    def get(self, product_id: str) -> dict | None:
        return self.store.find_by_id(product_id)

    # -- mutation --------------------------------------------------------

    def create(self, data: Mapping[str, Any]) -> dict:
        data = dict(data)
        data["salesPrice"] = sales_price(data.get("price"), data.get("discount"))
        return self.store.create(
            data,
            defaults={"discount": 0, "stock": 0, "colors": [], "sizes": [], "tags": [], "images": []},
            overrides={"isActive": True, "isDeleted": False, "rating": 0, "reviews": 0},
        )

    def update(self, product_id: str, patch: Mapping[str, Any]) -> dict:
        patch = {k: v for k, v in patch.items() if k not in ("id", "createdAt")}
        if "price" in patch or "discount" in patch:
            def _reprice(product: dict) -> None:
                product.update(patch)
                product["salesPrice"] = sales_price(product.get("price"), product.get("discount"))
            return self.store.modify(product_id, _reprice)
        return self.store.update(product_id, patch)

    def soft_delete(self, product_id: str) -> dict:
        return self.store.soft_delete(product_id)

    def restore(self, product_id: str) -> dict:
        return self.store.restore(product_id)

    def permanent_delete(self, product_id: str) -> bool:
        return self.store.permanent_delete(product_id)

    # -- query -----------------------------------------------------------

    def filter(self, filters: Mapping[str, Any]) -> list[dict]:
        """
        Filter active products.

        Recognized keys: category, gender, brand, brands, minPrice, maxPrice
        (on salesPrice), colors, sizes, search, sortBy.
        """
        spec = FilterSpec(
            equals={
                "category": filters.get("category"),
                "gender": filters.get("gender"),
                "brand": filters.get("brand"),
            },
            ranges={"salesPrice": (filters.get("minPrice"), filters.get("maxPrice"))},
            any_of={
                "colors": filters.get("colors") or (),
                "sizes": filters.get("sizes") or (),
                "brand": filters.get("brands") or (),
            },
            sort_by=filters.get("sortBy"),
        )
        return self.store.filter_by(spec, self.search(filters.get("search")))

    def search(self, term: str | None) -> list[dict]:
        return self.store.search(term, SEARCH_FIELDS, self.list_active())

    def stats(self) -> dict:
        products = self.store.load_all()
        active = [p for p in products if self.is_visible(p)]
        generic = self.store.stats(
            group_field="category",
            average_fields=("rating",),
            include=self.is_visible,
            records=products,
        )
        categories = _distinct(p.get("category") for p in active)
        brands = _distinct(p.get("brand") for p in active)
        return {
            "total": generic["total"],
            "byStatus": generic["byStatus"],
            "byCategory": generic["byGroup"],
            "totalProducts": len(active),
            "totalDeleted": generic["byStatus"].get("deleted", 0),
            "totalCategories": len(categories),
            "totalBrands": len(brands),
            "totalRevenue": sum(amount(p.get("salesPrice")) * amount(p.get("stock")) for p in active),
            "averageRating": generic["averages"]["rating"],
            "categories": categories,
            "brands": brands,
        }

    # -- facets ----------------------------------------------------------

    def categories(self) -> list:
        return _distinct(p.get("category") for p in self.list_active())

    def brands(self) -> list:
        return _distinct(p.get("brand") for p in self.list_active())

    def colors(self) -> list:
        return _distinct(c for p in self.list_active() for c in p.get("colors") or [])

    def sizes(self) -> list:
        return _distinct(s for p in self.list_active() for s in p.get("sizes") or [])
