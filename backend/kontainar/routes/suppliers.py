# Overview: Flask API routes for warehouse suppliers.

# backend/kontainar/routes/suppliers.py
from flask import Blueprint, current_app, request

from ..services.registry import get_services
from ..services.suppliers_service import SUPPLIER_STATUSES
from ..validation import (
    FieldPolicy,
    validate_payload,
    enforce_non_negative,
    ValidationError,
    NotFoundError,
    ConflictError,
    STRING,
    TEXT,
    EMAIL,
    NUMBER,
)
from .query_args import listing, text_args

SUPPLIER_POLICY = FieldPolicy(
    fields={
        "name": STRING,
        "contactPerson": STRING,
        "email": EMAIL,
        "phone": STRING,
        "address": TEXT,
        "category": STRING,
        "status": STRING,
        "creditLimit": NUMBER,
        "paymentTerms": STRING,
        "notes": TEXT,
    },
    required_on_create={"name"},
    nullable_fields={"contactPerson", "email", "phone", "address", "notes"},
    max_lengths={"name": 255},
)

suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/warehouse/suppliers")


def _check_rules(patch: dict) -> None:
    status = patch.get("status")
    if status is not None and status not in SUPPLIER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(SUPPLIER_STATUSES)}")
    enforce_non_negative(patch, "creditLimit")


@suppliers_bp.get("")
def list_suppliers():
    """Query params: search, status, category, sortBy (newest | oldest | name)."""
    filters = text_args("search", "status", "category", "sortBy")
    return listing(get_services().suppliers.filter(filters))


@suppliers_bp.get("/<supplier_id>")
def get_supplier(supplier_id: str):
    supplier = get_services().suppliers.get(supplier_id)
    if supplier is None:
        return {"error": "Supplier not found"}, 404
    return supplier


@suppliers_bp.post("")
def create_supplier_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=SUPPLIER_POLICY, partial=False)
        _check_rules(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = get_services().suppliers.create(patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to create supplier")
        return {"error": "Failed to create supplier"}, 500

    return created, 201


@suppliers_bp.route("/<supplier_id>", methods=["PUT", "PATCH"])
def update_supplier_route(supplier_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=SUPPLIER_POLICY, partial=True)
        _check_rules(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        return get_services().suppliers.update(supplier_id, patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409


@suppliers_bp.delete("/<supplier_id>")
def soft_delete_supplier_route(supplier_id: str):
    try:
        return get_services().suppliers.soft_delete(supplier_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@suppliers_bp.post("/<supplier_id>/restore")
def restore_supplier_route(supplier_id: str):
    try:
        return get_services().suppliers.restore(supplier_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@suppliers_bp.delete("/<supplier_id>/permanent")
def permanent_delete_supplier_route(supplier_id: str):
    deleted = get_services().suppliers.permanent_delete(supplier_id)
    return {"deleted": deleted, "id": supplier_id}
