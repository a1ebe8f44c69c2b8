# Overview: Flask API routes for the product catalog; parses input and returns JSON responses.

# backend/kontainar/routes/products.py
"""
Product catalog routes.

Listing defaults to active products (isActive and not isDeleted).
?view=all returns every product, ?view=deleted only soft-deleted ones.

DELETE /api/products/<id> is a soft delete; /permanent removes the record.
"""
from flask import Blueprint, current_app, request

from ..services.registry import get_services
from ..validation import (
    FieldPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    NotFoundError,
    STRING,
    TEXT,
    NUMBER,
    INTEGER,
    BOOLEAN,
    LIST,
    MAPPING,
)
from .query_args import list_arg, listing, text_args

PRODUCT_POLICY = FieldPolicy(
    fields={
        "title": STRING,
        "description": TEXT,
        "price": NUMBER,
        "discount": NUMBER,
        "category": STRING,
        "subcategory": STRING,
        "gender": STRING,
        "brand": STRING,
        "colors": LIST,
        "sizes": LIST,
        "stock": INTEGER,
        "rating": NUMBER,
        "reviews": INTEGER,
        "images": LIST,
        "tags": LIST,
        "specifications": MAPPING,
        "isActive": BOOLEAN,
    },
    required_on_create={"title", "price", "category"},
    nullable_fields={"description", "subcategory", "gender", "brand", "specifications"},
    max_lengths={"title": 255, "category": 128, "brand": 128},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List products.

    Query params:
    - view: active (default) | all | deleted
    - search: substring over title, description, brand, category, tags
    - category, gender, brand: exact match ("all" disables)
    - brands, colors, sizes: comma-separated or repeated; any match
    - minPrice, maxPrice: inclusive bounds on salesPrice
    - sortBy: price-low | price-high | rating | newest | oldest | name
    """
    products = get_services().products
    view = request.args.get("view", "active")

    if view == "all":
        return listing(products.list_all())
    if view == "deleted":
        return listing(products.list_deleted())
    if view != "active":
        return {"error": "view must be one of: active, all, deleted"}, 400

    filters = text_args("search", "category", "gender", "brand", "sortBy")
    filters["brands"] = list_arg("brands")
    filters["colors"] = list_arg("colors")
    filters["sizes"] = list_arg("sizes")
    filters["minPrice"] = request.args.get("minPrice", type=float)
    filters["maxPrice"] = request.args.get("maxPrice", type=float)
    return listing(products.filter(filters))


@products_bp.get("/stats")
def product_stats():
    return get_services().products.stats()


@products_bp.get("/facets")
def product_facets():
    """Distinct categories, brands, colors and sizes across active products."""
    products = get_services().products
    return {
        "categories": products.categories(),
        "brands": products.brands(),
        "colors": products.colors(),
        "sizes": products.sizes(),
    }


@products_bp.get("/<product_id>")
def get_product(product_id: str):
    product = get_services().products.get(product_id)
    if product is None:
        return {"error": "Product not found"}, 404
    return product


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = get_services().products.create(patch)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Failed to create product"}, 500

    return created, 201


@products_bp.route("/<product_id>", methods=["PUT", "PATCH"])
def update_product_route(product_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        updated = get_services().products.update(product_id, patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return updated


@products_bp.delete("/<product_id>")
def soft_delete_product_route(product_id: str):
    try:
        return get_services().products.soft_delete(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.post("/<product_id>/restore")
def restore_product_route(product_id: str):
    try:
        return get_services().products.restore(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.delete("/<product_id>/permanent")
def permanent_delete_product_route(product_id: str):
    deleted = get_services().products.permanent_delete(product_id)
    return {"deleted": deleted, "id": product_id}
