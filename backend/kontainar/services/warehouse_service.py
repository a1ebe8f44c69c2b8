# Overview: Cross-collection warehouse workflows and statistics.

"""
Warehouse Service

Ties suppliers, inventory and purchases together.

Delivery workflow (update_purchase_status -> "delivered"):
1. The purchase status is saved (warehouse_purchases).
2. Inventory currentStock is increased by each line item's quantity for the
   item with the same sku (warehouse_inventory).

PUT-style updates that carry a status go through update_purchase, which uses
the same path.

The two saves are independent. If step 2 fails, step 1 is NOT rolled back and
the purchase reads as delivered while stock was never received. The failure
is logged and re-raised to the caller. Stock is only received on the
transition into "delivered"; repeating the status does not receive twice.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..validation import ValidationError
from .collection_store import amount
from .inventory_service import InventoryService, is_low_stock, is_out_of_stock
from .purchases_service import PURCHASE_STATUSES, PurchasesService
from .suppliers_service import SuppliersService


logger = logging.getLogger(__name__)

DELIVERED = "delivered"


class WarehouseService:
    def __init__(self, suppliers: SuppliersService, inventory: InventoryService, purchases: PurchasesService):
        self.suppliers = suppliers
        self.inventory = inventory
        self.purchases = purchases

    def initialize(self) -> None:
        self.suppliers.initialize()
        self.inventory.initialize()
        self.purchases.initialize()

    def create_purchase(self, data: Mapping[str, Any]) -> dict:
        """Create a purchase order, filling supplierName from the supplier when omitted."""
        data = dict(data)
        if not data.get("supplierName") and data.get("supplierId"):
            supplier = self.suppliers.get(data["supplierId"])
            if supplier is not None:
                data["supplierName"] = supplier.get("name")
        return self.purchases.create(data)

    def update_purchase(self, purchase_id: str, patch: Mapping[str, Any]) -> dict:
        """Apply a field patch; a status in the patch goes through update_purchase_status."""
        patch = dict(patch)
        status = patch.pop("status", None)
        if status is not None and status not in PURCHASE_STATUSES:
            raise ValidationError(f"Invalid purchase status: {status}")
        purchase = self.purchases.update(purchase_id, patch)
        if status is not None:
            purchase = self.update_purchase_status(purchase_id, status, patch.get("deliveredDate"))
        return purchase

    def update_purchase_status(self, purchase_id: str, status: str, delivered_date: str | None = None) -> dict:
        purchase, previous = self.purchases.update_status(purchase_id, status, delivered_date)
        if status == DELIVERED and previous != DELIVERED:
            self.receive_purchase(purchase)
        return purchase

    def receive_purchase(self, purchase: Mapping[str, Any]) -> dict:
        quantities: dict[str, int | float] = {}
        for item in purchase.get("items") or []:
            sku = item.get("sku")
            if not sku:
                continue
            quantities[sku] = quantities.get(sku, 0) + amount(item.get("quantity"))

        try:
            updated, unmatched = self.inventory.receive_by_sku(quantities)
        except Exception:
            logger.exception(
                "Purchase %s marked delivered but inventory was not updated",
                purchase.get("purchaseNumber") or purchase.get("id"),
            )
            raise

        if unmatched:
            logger.info(
                "Purchase %s: no inventory item for sku %s",
                purchase.get("purchaseNumber"),
                ", ".join(unmatched),
            )
        logger.info("Purchase %s received into %d inventory items", purchase.get("purchaseNumber"), len(updated))
        return {"updated": updated, "unmatched": unmatched}

    def stats(self) -> dict:
        inventory = self.inventory.list_all()
        purchases = self.purchases.list_all()
        suppliers = self.suppliers.list_all()

        pending = [p for p in purchases if p.get("status") == "pending"]
        return {
            "totalItems": len(inventory),
            "totalInventoryValue": sum(
                amount(item.get("currentStock")) * amount(item.get("unitCost")) for item in inventory
            ),
            "lowStockItems": sum(1 for item in inventory if is_low_stock(item)),
            "outOfStockItems": sum(1 for item in inventory if is_out_of_stock(item)),
            "totalSuppliers": len(suppliers),
            "activeSuppliers": sum(1 for s in suppliers if s.get("status") == "active"),
            "pendingPurchases": len(pending),
            "totalPendingValue": sum(amount(p.get("total")) for p in pending),
            "totalPurchases": len(purchases),
        }
