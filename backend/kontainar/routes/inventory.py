# Overview: Flask API routes for warehouse inventory items and stock adjustments.

# backend/kontainar/routes/inventory.py
"""
Inventory routes.

POST /api/warehouse/inventory/<id>/stock
    {"quantity": 5, "operation": "add" | "subtract" | "set"}
currentStock never drops below zero.
"""
from flask import Blueprint, current_app, request

from ..services.inventory_service import STOCK_LEVELS
from ..services.registry import get_services
from ..validation import (
    FieldPolicy,
    validate_payload,
    enforce_rules_inventory,
    ValidationError,
    NotFoundError,
    ConflictError,
    STRING,
    NUMBER,
)
from .query_args import listing, text_args

INVENTORY_POLICY = FieldPolicy(
    fields={
        "productId": STRING,
        "productName": STRING,
        "sku": STRING,
        "category": STRING,
        "currentStock": NUMBER,
        "minStock": NUMBER,
        "maxStock": NUMBER,
        "unitCost": NUMBER,
        "sellingPrice": NUMBER,
        "location": STRING,
        "supplierId": STRING,
        "status": STRING,
    },
    required_on_create={"productName", "sku"},
    nullable_fields={"productId", "location", "supplierId"},
    max_lengths={"sku": 64, "productName": 255},
)

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/warehouse/inventory")


@inventory_bp.get("")
def list_inventory():
    """
    Query params:
    - search: substring over productName, sku, category, location
    - category, supplierId, status: exact match ("all" disables)
    - stockLevel: low | out | high
    - sortBy: newest | oldest | name | stock-low | stock-high | value-high
    """
    filters = text_args("search", "category", "supplierId", "status", "stockLevel", "sortBy")
    level = filters.get("stockLevel")
    if level and level != "all" and level not in STOCK_LEVELS:
        return {"error": f"stockLevel must be one of: {', '.join(STOCK_LEVELS)}"}, 400
    return listing(get_services().inventory.filter(filters))


@inventory_bp.get("/low-stock")
def list_low_stock():
    return listing(get_services().inventory.low_stock())


@inventory_bp.get("/<item_id>")
def get_inventory_item(item_id: str):
    item = get_services().inventory.get(item_id)
    if item is None:
        return {"error": "Inventory item not found"}, 404
    return item


@inventory_bp.post("")
def create_inventory_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=INVENTORY_POLICY, partial=False)
        enforce_rules_inventory(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = get_services().inventory.create(patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to create inventory item")
        return {"error": "Failed to create inventory item"}, 500

    return created, 201


@inventory_bp.route("/<item_id>", methods=["PUT", "PATCH"])
def update_inventory_route(item_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=INVENTORY_POLICY, partial=True)
        enforce_rules_inventory(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        return get_services().inventory.update(item_id, patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409


@inventory_bp.post("/<item_id>/stock")
def update_stock_route(item_id: str):
    payload = request.get_json(silent=True) or {}
    operation = payload.get("operation", "set")

    try:
        return get_services().inventory.update_stock(item_id, payload.get("quantity"), operation)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404


@inventory_bp.delete("/<item_id>")
def soft_delete_inventory_route(item_id: str):
    try:
        return get_services().inventory.soft_delete(item_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@inventory_bp.post("/<item_id>/restore")
def restore_inventory_route(item_id: str):
    try:
        return get_services().inventory.restore(item_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@inventory_bp.delete("/<item_id>/permanent")
def permanent_delete_inventory_route(item_id: str):
    deleted = get_services().inventory.permanent_delete(item_id)
    return {"deleted": deleted, "id": item_id}
