# Overview: Per-application container wiring every domain service to one storage backend.

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from ..storage import KeyValueStorage, build_storage
from .inventory_service import InventoryService
from .products_service import ProductsService
from .purchases_service import DEFAULT_TAX_RATE, PurchasesService
from .sellers_service import SellersService
from .suppliers_service import SuppliersService
from .users_service import UsersService
from .warehouse_service import WarehouseService

EXTENSION_KEY = "kontainar"


@dataclass
class Services:
    storage: KeyValueStorage
    products: ProductsService
    users: UsersService
    sellers: SellersService
    suppliers: SuppliersService
    inventory: InventoryService
    purchases: PurchasesService
    warehouse: WarehouseService

    def domains(self) -> dict:
        """Domain name -> service, in seeding order."""
        return {
            "products": self.products,
            "users": self.users,
            "sellers": self.sellers,
            "suppliers": self.suppliers,
            "inventory": self.inventory,
            "purchases": self.purchases,
        }

    def initialize_all(self) -> None:
        for service in self.domains().values():
            service.initialize()

    def reset(self, domain: str) -> int:
        """Drop one collection and write its seed again. Returns the new record count."""
        service = self.domains().get(domain)
        if service is None:
            raise KeyError(domain)
        self.storage.remove_item(service.store.key)
        service.initialize()
        return len(service.store.load_all())


def build_services(storage: KeyValueStorage, *, tax_rate: float = DEFAULT_TAX_RATE, **store_options) -> Services:
    """
    Wire all domain services onto one storage backend.

    store_options (e.g. clock) are forwarded to every CollectionStore;
    tests use them to pin timestamps.
    """
    suppliers = SuppliersService(storage, **store_options)
    inventory = InventoryService(storage, **store_options)
    purchases = PurchasesService(storage, tax_rate=tax_rate, **store_options)
    return Services(
        storage=storage,
        products=ProductsService(storage, **store_options),
        users=UsersService(storage, **store_options),
        sellers=SellersService(storage, **store_options),
        suppliers=suppliers,
        inventory=inventory,
        purchases=purchases,
        warehouse=WarehouseService(suppliers, inventory, purchases),
    )


def init_services(app: Flask) -> Services:
    storage = build_storage(app.config["STORAGE_BACKEND"])
    services = build_services(storage, tax_rate=app.config["PURCHASE_TAX_RATE"])
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
