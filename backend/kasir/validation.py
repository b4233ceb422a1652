from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError


# Upper bound for any single money value or stock count.
# Keeps integer columns away from overflow on every backend.
MAX_MONEY = 999_999_999_999
MAX_STOCK = 1_000_000_000

PAYMENT_METHODS = ("cash", "card", "transfer")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(field: str, value: Any) -> int:
    """
    Strict integer coercion: rejects bools, floats, scientific notation
    and decimal strings.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    if isinstance(coltype, (String, Text)):
        if not isinstance(value, (str, int)) or isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    for field in ("unit_price", "unit_cost"):
        if field in patch and patch[field] is not None:
            value = patch[field]
            if value < 0:
                raise ValidationError(f"{field} must be >= 0")
            if value > MAX_MONEY:
                raise ValidationError(f"{field} cannot exceed {MAX_MONEY}")

    if "stock_quantity" in patch and patch["stock_quantity"] is not None:
        stock = patch["stock_quantity"]
        if stock < 0:
            raise ValidationError("stock_quantity must be >= 0")
        if stock > MAX_STOCK:
            raise ValidationError(f"stock_quantity cannot exceed {MAX_STOCK}")


def validate_cart_items(items: Any) -> list[dict]:
    """
    Normalize a cart into [{"product_id": int, "quantity": int}, ...].

    Order is preserved and duplicate product ids are kept as separate lines.
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("Cart must contain at least one item")

    cleaned = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{index}] must be an object")
        if item.get("product_id") is None:
            raise ValidationError(f"items[{index}].product_id is required")
        if item.get("quantity") is None:
            raise ValidationError(f"items[{index}].quantity is required")

        product_id = item["product_id"]
        quantity = item["quantity"]
        # JSON numbers only; "2", 2.0 and true are all rejected
        for field, value in (("product_id", product_id), ("quantity", quantity)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"items[{index}].{field} must be an integer")
        if quantity <= 0:
            raise ValidationError(f"items[{index}].quantity must be > 0")
        if quantity > MAX_STOCK:
            raise ValidationError(f"items[{index}].quantity cannot exceed {MAX_STOCK}")

        cleaned.append({"product_id": product_id, "quantity": quantity})
    return cleaned


def normalize_payment_method(value: Any) -> str:
    if not isinstance(value, str) or value.strip().lower() not in PAYMENT_METHODS:
        raise ValidationError(
            f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}"
        )
    return value.strip().lower()


def normalize_customer_name(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("customer_name must be a string")
    name = value.strip()
    if not name:
        return None
    if len(name) > 255:
        raise ValidationError("customer_name exceeds max length 255")
    return name
