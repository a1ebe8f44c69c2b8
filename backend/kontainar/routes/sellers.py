# Overview: Flask API routes for marketplace sellers.

# backend/kontainar/routes/sellers.py
"""
Seller routes.

Email (case-insensitive) and sellerId are unique; collisions return 409.
Permanently deleting an unknown seller returns 404.
"""
from flask import Blueprint, current_app, request

from ..services.registry import get_services
from ..services.sellers_service import SELLER_STATUSES, VERIFICATION_STATUSES
from ..validation import (
    FieldPolicy,
    validate_payload,
    enforce_rules_seller,
    ValidationError,
    NotFoundError,
    ConflictError,
    STRING,
    TEXT,
    EMAIL,
    NUMBER,
    DATE,
    LIST,
    MAPPING,
)
from .query_args import listing, text_args

SELLER_POLICY = FieldPolicy(
    fields={
        "firstName": STRING,
        "lastName": STRING,
        "email": EMAIL,
        "phone": STRING,
        "dateOfBirth": DATE,
        "gender": STRING,
        "address": MAPPING,
        "sellerId": STRING,
        "businessName": STRING,
        "businessType": STRING,
        "businessLicense": STRING,
        "taxId": STRING,
        "commissionRate": NUMBER,
        "status": STRING,
        "verificationStatus": STRING,
        "bankAccount": MAPPING,
        "paymentMethod": STRING,
        "storeSettings": MAPPING,
        "socialMedia": MAPPING,
        "documents": LIST,
        "notes": TEXT,
        "tags": LIST,
    },
    required_on_create={"firstName", "lastName", "email", "sellerId", "businessName"},
    nullable_fields={"dateOfBirth", "gender", "phone", "businessLicense", "taxId"},
    max_lengths={"email": 255, "sellerId": 64, "businessName": 255},
)

sellers_bp = Blueprint("sellers", __name__, url_prefix="/api/sellers")


def _check_enums(patch: dict) -> None:
    status = patch.get("status")
    if status is not None and status not in SELLER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(SELLER_STATUSES)}")
    verification = patch.get("verificationStatus")
    if verification is not None and verification not in VERIFICATION_STATUSES:
        raise ValidationError(f"verificationStatus must be one of: {', '.join(VERIFICATION_STATUSES)}")


@sellers_bp.get("")
def list_sellers():
    """
    Query params:
    - search: substring over names, email, phone, sellerId, business fields, tags
    - status: active | pending | suspended | deleted
    - businessType
    """
    sellers = get_services().sellers
    args = text_args("search", "status", "businessType")

    records = sellers.search(args.get("search"))
    if args.get("status") and args["status"] != "all":
        records = [s for s in records if s.get("status") == args["status"]]
    if args.get("businessType") and args["businessType"] != "all":
        records = [s for s in records if s.get("businessType") == args["businessType"]]
    return listing(records)


@sellers_bp.get("/stats")
def seller_stats():
    return get_services().sellers.stats()


@sellers_bp.get("/business-types")
def seller_business_types():
    return {"businessTypes": get_services().sellers.business_types()}


@sellers_bp.get("/tags")
def seller_tags():
    return {"tags": get_services().sellers.tags()}


@sellers_bp.get("/lookup")
def lookup_seller():
    """Find a seller by ?email= (case-insensitive) or ?sellerId=."""
    sellers = get_services().sellers
    args = text_args("email", "sellerId")
    if "email" in args:
        seller = sellers.get_by_email(args["email"])
    elif "sellerId" in args:
        seller = sellers.get_by_seller_id(args["sellerId"])
    else:
        return {"error": "email or sellerId is required"}, 400

    if seller is None:
        return {"error": "Seller not found"}, 404
    return seller


@sellers_bp.get("/<seller_pk>")
def get_seller(seller_pk: str):
    seller = get_services().sellers.get(seller_pk)
    if seller is None:
        return {"error": "Seller not found"}, 404
    return seller


@sellers_bp.post("")
def create_seller_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=SELLER_POLICY, partial=False)
        enforce_rules_seller(patch)
        _check_enums(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = get_services().sellers.create(patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to create seller")
        return {"error": "Failed to create seller"}, 500

    return created, 201


@sellers_bp.route("/<seller_pk>", methods=["PUT", "PATCH"])
def update_seller_route(seller_pk: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=SELLER_POLICY, partial=True)
        enforce_rules_seller(patch)
        _check_enums(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        return get_services().sellers.update(seller_pk, patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409


@sellers_bp.put("/<seller_pk>/status")
def set_seller_status_route(seller_pk: str):
    payload = request.get_json(silent=True) or {}
    try:
        return get_services().sellers.set_status(seller_pk, payload.get("status"))
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404


@sellers_bp.post("/<seller_pk>/sales")
def record_seller_sale_route(seller_pk: str):
    """Count one order of the given amount: {"amount": 120.5}."""
    payload = request.get_json(silent=True) or {}
    try:
        return get_services().sellers.record_sale(seller_pk, payload.get("amount"))
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404


@sellers_bp.delete("/<seller_pk>")
def soft_delete_seller_route(seller_pk: str):
    try:
        return get_services().sellers.soft_delete(seller_pk)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@sellers_bp.post("/<seller_pk>/restore")
def restore_seller_route(seller_pk: str):
    try:
        return get_services().sellers.restore(seller_pk)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@sellers_bp.delete("/<seller_pk>/permanent")
def permanent_delete_seller_route(seller_pk: str):
    try:
        deleted = get_services().sellers.permanent_delete(seller_pk)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"deleted": deleted, "id": seller_pk}
