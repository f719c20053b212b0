from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError
from .money import quantize_money
from .time_utils import parse_iso_datetime


# Upper bound for any stored amount: Numeric(12, 2) with headroom
MAX_AMOUNT = Decimal("9999999999.99")

REFUND_MIN_AMOUNT = Decimal("0.01")
REFUND_MAX_AMOUNT = Decimal("999999.99")

# Signed 64-bit: the widest INTEGER any supported backend stores
MIN_INT = -(2 ** 63)
MAX_INT = 2 ** 63 - 1


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - choices: allowed literal values for enumerated string columns
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    choices: dict[str, set[str]] | None = None


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(key: str, value: Any) -> int:
    """Strict integer coercion: rejects bools, floats, scientific notation and out-of-range values."""
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            number = int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{key} must be an integer")
    if number < MIN_INT or number > MAX_INT:
        raise ValidationError(f"{key} is out of range")
    return number


def coerce_decimal(key: str, value: Any) -> Decimal:
    """Money coercion to a 2-place Decimal; accepts numbers and numeric strings."""
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{key} must be a number")
    else:
        raise ValidationError(f"{key} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{key} must be a finite number")
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"{key} cannot exceed {MAX_AMOUNT}")
    try:
        return quantize_money(amount)
    except InvalidOperation:
        raise ValidationError(f"{key} must be a number")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    if isinstance(coltype, Numeric):
        return coerce_decimal(col.key, value)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    if isinstance(coltype, (String, Text)):
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
    - enumerated choices
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

    choices = policy.choices or {}
    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable or k in required:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and (not col.nullable or k in required):
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        if k in choices and val not in choices[k]:
            allowed = ", ".join(sorted(choices[k]))
            raise ValidationError(f"{k} must be one of: {allowed}")

        patch[k] = val

    return patch


def enforce_non_negative_amounts(patch: dict, fields: tuple[str, ...]) -> None:
    """Monetary fields are never negative and fit the column."""
    for name in fields:
        amount = patch.get(name)
        if amount is None:
            continue
        if amount < 0:
            raise ValidationError(f"{name} must be >= 0")
        if amount > MAX_AMOUNT:
            raise ValidationError(f"{name} cannot exceed {MAX_AMOUNT}")


def enforce_rules_refund_amount(amount: Decimal, sale_total: Decimal) -> None:
    if amount < REFUND_MIN_AMOUNT:
        raise ValidationError(f"amount must be at least {REFUND_MIN_AMOUNT}")
    if amount > REFUND_MAX_AMOUNT:
        raise ValidationError(f"amount cannot exceed {REFUND_MAX_AMOUNT}")
    if amount > sale_total:
        raise ValidationError("Refund amount cannot exceed the sale total")


def enforce_rules_pin(pin: Any) -> str:
    """PINs are 4-8 characters."""
    if not isinstance(pin, str):
        raise ValidationError("pin must be a string")
    pin = pin.strip()
    if len(pin) < 4 or len(pin) > 8:
        raise ValidationError("pin must be between 4 and 8 characters")
    return pin
