# Overview: Flask API routes for warehouse purchase orders and the delivery workflow.

# backend/kontainar/routes/purchases.py
"""
Purchase order routes.

Creating an order assigns the next PO-YYYY-NNN number and computes totals.
PUT /<id> does not recompute totals; POST /<id>/recalculate does. A status
in a PUT /<id> body is applied the same way as PUT /<id>/status.

PUT /<id>/status {"status": "delivered", "deliveredDate": "..."} receives
each line item into the inventory item with the same sku. The purchase is
saved first; a failure while receiving stock is logged and returned as 500
with the purchase left as delivered.

Purchases have no soft delete: DELETE removes the order.
"""
from flask import Blueprint, current_app, request

from ..services.purchases_service import PURCHASE_STATUSES
from ..services.registry import get_services
from ..validation import (
    FieldPolicy,
    validate_payload,
    enforce_rules_purchase,
    ValidationError,
    NotFoundError,
    ConflictError,
    STRING,
    TEXT,
    DATE,
    LIST,
)
from .query_args import listing, text_args

PURCHASE_POLICY = FieldPolicy(
    fields={
        "purchaseNumber": STRING,
        "supplierId": STRING,
        "supplierName": STRING,
        "orderDate": DATE,
        "expectedDelivery": DATE,
        "deliveredDate": DATE,
        "status": STRING,
        "items": LIST,
        "notes": TEXT,
    },
    required_on_create={"supplierId", "items"},
    nullable_fields={"expectedDelivery", "deliveredDate", "notes"},
    max_lengths={"purchaseNumber": 32},
)

purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/warehouse/purchases")


@purchases_bp.get("")
def list_purchases():
    """
    Query params:
    - search: substring over purchaseNumber, supplierName, line item productName
    - status, supplierId: exact match ("all" disables)
    - sortBy: newest | oldest | amount-high | amount-low | supplier
    """
    filters = text_args("search", "status", "supplierId", "sortBy")
    return listing(get_services().purchases.filter(filters))


@purchases_bp.get("/<purchase_id>")
def get_purchase(purchase_id: str):
    purchase = get_services().purchases.get(purchase_id)
    if purchase is None:
        return {"error": "Purchase order not found"}, 404
    return purchase


@purchases_bp.post("")
def create_purchase_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=PURCHASE_POLICY, partial=False)
        enforce_rules_purchase(patch)
        created = get_services().warehouse.create_purchase(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409

    return created, 201


@purchases_bp.route("/<purchase_id>", methods=["PUT", "PATCH"])
def update_purchase_route(purchase_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=PURCHASE_POLICY, partial=True)
        enforce_rules_purchase(patch)
        return get_services().warehouse.update_purchase(purchase_id, patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to update purchase order")
        return {"error": "Purchase order saved but inventory was not updated"}, 500


@purchases_bp.post("/<purchase_id>/recalculate")
def recalculate_purchase_route(purchase_id: str):
    try:
        return get_services().purchases.recalculate_totals(purchase_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@purchases_bp.put("/<purchase_id>/status")
def update_purchase_status_route(purchase_id: str):
    payload = request.get_json(silent=True) or {}
    status = payload.get("status")
    if status not in PURCHASE_STATUSES:
        return {"error": f"status must be one of: {', '.join(PURCHASE_STATUSES)}"}, 400

    try:
        return get_services().warehouse.update_purchase_status(
            purchase_id, status, payload.get("deliveredDate")
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update purchase status")
        return {"error": "Purchase status saved but inventory was not updated"}, 500


@purchases_bp.delete("/<purchase_id>")
def delete_purchase_route(purchase_id: str):
    deleted = get_services().purchases.permanent_delete(purchase_id)
    return {"deleted": deleted, "id": purchase_id}
