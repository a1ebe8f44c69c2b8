# Overview: Flask API routes for back-office user accounts.

# backend/kontainar/routes/users.py
from flask import Blueprint, current_app, request

from ..services.registry import get_services
from ..services.users_service import USER_ROLES, USER_STATUSES
from ..validation import (
    FieldPolicy,
    validate_payload,
    ValidationError,
    NotFoundError,
    STRING,
    EMAIL,
    LIST,
)
from .query_args import listing, text_args

USER_POLICY = FieldPolicy(
    fields={
        "firstName": STRING,
        "lastName": STRING,
        "email": EMAIL,
        "phone": STRING,
        "role": STRING,
        "department": STRING,
        "position": STRING,
        "avatar": STRING,
        "permissions": LIST,
    },
    required_on_create={"firstName", "lastName", "email"},
    nullable_fields={"avatar", "phone", "department", "position"},
    max_lengths={"firstName": 100, "lastName": 100, "email": 255},
)

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _check_role(patch: dict) -> None:
    role = patch.get("role")
    if role is not None and role not in USER_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(USER_ROLES)}")


@users_bp.get("")
def list_users():
    """
    Query params:
    - search: substring over names, email, phone, department, position
    - status: active | inactive | deleted
    - role: admin | manager | user
    """
    users = get_services().users
    args = text_args("search", "status", "role")

    status = args.get("status")
    if status and status != "all" and status not in USER_STATUSES:
        return {"error": f"status must be one of: {', '.join(USER_STATUSES)}"}, 400

    records = users.search(args.get("search"))
    if status and status != "all":
        records = [u for u in records if u.get("status") == status]
    if args.get("role") and args["role"] != "all":
        records = [u for u in records if u.get("role") == args["role"]]
    return listing(records)


@users_bp.get("/stats")
def user_stats():
    return get_services().users.stats()


@users_bp.get("/<user_id>")
def get_user(user_id: str):
    user = get_services().users.get(user_id)
    if user is None:
        return {"error": "User not found"}, 404
    return user


@users_bp.post("")
def create_user_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=USER_POLICY, partial=False)
        _check_role(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = get_services().users.create(patch)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return {"error": "Failed to create user"}, 500

    return created, 201


@users_bp.route("/<user_id>", methods=["PUT", "PATCH"])
def update_user_route(user_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(payload=payload, policy=USER_POLICY, partial=True)
        _check_role(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        return get_services().users.update(user_id, patch)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@users_bp.delete("/<user_id>")
def soft_delete_user_route(user_id: str):
    try:
        return get_services().users.soft_delete(user_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@users_bp.post("/<user_id>/restore")
def restore_user_route(user_id: str):
    try:
        return get_services().users.restore(user_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@users_bp.delete("/<user_id>/permanent")
def permanent_delete_user_route(user_id: str):
    deleted = get_services().users.permanent_delete(user_id)
    return {"deleted": deleted, "id": user_id}


@users_bp.post("/<user_id>/toggle-status")
def toggle_user_status_route(user_id: str):
    try:
        return get_services().users.toggle_status(user_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@users_bp.put("/<user_id>/permissions")
def update_user_permissions_route(user_id: str):
    payload = request.get_json(silent=True) or {}
    permissions = payload.get("permissions")
    if not isinstance(permissions, list):
        return {"error": "permissions must be a list"}, 400

    try:
        return get_services().users.update_permissions(user_id, permissions)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@users_bp.post("/<user_id>/verify-email")
def verify_user_email_route(user_id: str):
    try:
        return get_services().users.verify_email(user_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@users_bp.post("/<user_id>/verify-phone")
def verify_user_phone_route(user_id: str):
    try:
        return get_services().users.verify_phone(user_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@users_bp.post("/<user_id>/toggle-two-factor")
def toggle_two_factor_route(user_id: str):
    try:
        return get_services().users.toggle_two_factor(user_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@users_bp.post("/<user_id>/login")
def record_user_login_route(user_id: str):
    try:
        return get_services().users.record_login(user_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
