from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from .time_utils import parse_iso_datetime


# Maximum price accepted for catalog and purchasing amounts.
MAX_AMOUNT = 999_999_999

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level: the operation targets an id that is not in the collection."""


class ConflictError(ValueError):
    """409-level business rule conflict."""


class DuplicateKeyError(ConflictError):
    """A unique field collides with another record of the same collection."""

    def __init__(self, message: str, *, field_name: str | None = None, value: Any = None):
        super().__init__(message)
        self.field_name = field_name
        self.value = value


class StorageReadError(Exception):
    """
    A stored blob could not be deserialized.

    Raised and caught inside the store only; callers observe an empty collection.
    """


# Field kinds understood by validate_payload.
STRING = "string"
TEXT = "text"
EMAIL = "email"
NUMBER = "number"
INTEGER = "integer"
BOOLEAN = "boolean"
DATE = "date"
LIST = "list"
MAPPING = "mapping"
ANY = "any"


@dataclass(frozen=True)
class FieldPolicy:
    """
    Central policy layer:
    - fields: writable field name -> kind (security boundary)
    - required_on_create: fields required for POST
    - nullable_fields: fields that may be explicitly set to null
    - max_lengths: per-field max length for strings
    """
    fields: dict[str, str]
    required_on_create: set[str] = field(default_factory=set)
    nullable_fields: set[str] = field(default_factory=set)
    max_lengths: dict[str, int] = field(default_factory=dict)

    @property
    def writable_fields(self) -> set[str]:
        return set(self.fields)


def _coerce_value(name: str, kind: str, value: Any):
    # Integers - strict validation to reject floats and scientific notation
    if kind == INTEGER:
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{name} must be an integer")
            if "e" in stripped.lower():
                raise ValidationError(f"{name} must be a plain integer (scientific notation not allowed)")
            if "." in stripped:
                raise ValidationError(f"{name} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{name} must be an integer")
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise ValidationError(f"{name} must be an integer")

    if kind == NUMBER:
        if isinstance(value, bool):
            raise ValidationError(f"{name} must be a number")
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            try:
                number = float(stripped)
            except ValueError:
                raise ValidationError(f"{name} must be a number")
            return int(number) if number.is_integer() and "." not in stripped else number
        raise ValidationError(f"{name} must be a number")

    if kind == BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        # fallback: truthiness
        return bool(value)

    # Dates are kept as the caller's ISO string, but must parse
    if kind == DATE:
        if not isinstance(value, str):
            raise ValidationError(f"{name} must be an ISO-8601 date")
        try:
            parsed = parse_iso_datetime(value)
        except ValueError:
            raise ValidationError(f"{name} must be an ISO-8601 date")
        if parsed is None:
            raise ValidationError(f"{name} must be an ISO-8601 date")
        return value.strip()

    if kind == LIST:
        if not isinstance(value, (list, tuple)):
            raise ValidationError(f"{name} must be a list")
        return list(value)

    if kind == MAPPING:
        if not isinstance(value, dict):
            raise ValidationError(f"{name} must be an object")
        return dict(value)

    if kind == EMAIL:
        email = str(value).strip()
        if not EMAIL_RE.match(email):
            raise ValidationError(f"{name} must be a valid email address")
        return email

    # Strings / Text
    if kind in (STRING, TEXT):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{name} must be a string")
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(*, payload: Any, policy: FieldPolicy, partial: bool) -> dict:
    """
    Validates + normalizes incoming JSON against a FieldPolicy.

    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.fields:
            raise ValidationError(f"Field not allowed: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        kind = policy.fields[k]

        # NULL handling
        if raw is None:
            if k not in policy.nullable_fields:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(k, kind, raw)

        # Blank string check for required text fields
        if kind in (STRING, TEXT, EMAIL) and k in policy.required_on_create:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        max_length = policy.max_lengths.get(k)
        if max_length and isinstance(val, str) and len(val) > max_length:
            raise ValidationError(f"{k} exceeds max length {max_length}")

        patch[k] = val

    return patch


def enforce_non_negative(patch: dict, *fields: str) -> None:
    for name in fields:
        value = patch.get(name)
        if value is None:
            continue
        if value < 0:
            raise ValidationError(f"{name} must be >= 0")
        if value > MAX_AMOUNT:
            raise ValidationError(f"{name} cannot exceed {MAX_AMOUNT:,}")


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by the field policy alone.
    Keep these small and centralized.
    """
    enforce_non_negative(patch, "price", "stock")
    discount = patch.get("discount")
    if discount is not None and not 0 <= discount <= 100:
        raise ValidationError("discount must be between 0 and 100")
    rating = patch.get("rating")
    if rating is not None and not 0 <= rating <= 5:
        raise ValidationError("rating must be between 0 and 5")


def enforce_rules_seller(patch: dict) -> None:
    rate = patch.get("commissionRate")
    if rate is not None and not 0 <= rate <= 100:
        raise ValidationError("commissionRate must be between 0 and 100")
    enforce_non_negative(patch, "totalSales", "totalOrders")


def enforce_rules_inventory(patch: dict) -> None:
    enforce_non_negative(patch, "currentStock", "minStock", "maxStock", "unitCost", "sellingPrice")
    min_stock = patch.get("minStock")
    max_stock = patch.get("maxStock")
    if min_stock is not None and max_stock is not None and min_stock > max_stock:
        raise ValidationError("minStock cannot exceed maxStock")


def enforce_rules_purchase(patch: dict) -> None:
    items = patch.get("items")
    if items is None:
        return
    if not items:
        raise ValidationError("items must contain at least one line item")
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")
        for name in ("quantity", "unitCost"):
            value = item.get(name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(f"items[{index}].{name} must be a number")
            if value < 0:
                raise ValidationError(f"items[{index}].{name} must be >= 0")
        if not item.get("sku") and not item.get("productId"):
            raise ValidationError(f"items[{index}] requires sku or productId")
