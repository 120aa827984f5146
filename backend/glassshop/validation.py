from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .money import to_decimal
from .time_utils import parse_iso_date, parse_iso_datetime


# Largest amount a NUMERIC(12,2) column holds
MAX_AMOUNT = Decimal("9999999999.99")

_THICKNESS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*mm", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*$")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate username)."""


class NotFoundError(LookupError):
    """404: missing, or owned by another shop."""


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


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or "e" in stripped.lower() or "." in stripped:
                raise ValidationError(f"{col.key} must be an integer")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        raise ValidationError(f"{col.key} must be an integer")

    if isinstance(coltype, Numeric):
        amount = to_decimal(value, col.key)
        if amount is not None and abs(amount) > MAX_AMOUNT:
            raise ValidationError(f"{col.key} is out of range")
        return amount

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "y"}
        return bool(value)

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

    if isinstance(coltype, Date):
        if isinstance(value, date):
            return value
        try:
            d = parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{col.key} must be a date (YYYY-MM-DD)")
        return d

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
    Returns a cleaned patch dict with only writable fields.

    Unknown keys are ignored rather than rejected; the UI sends whole
    form objects back.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            continue
        col = cols[k]

        if raw is None or (isinstance(raw, str) and not raw.strip() and col.nullable):
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def parse_thickness(thickness=None, glass_type: str | None = None) -> Decimal:
    """
    Resolve a positive thickness in millimetres.

    An explicit value wins; otherwise the number is read out of the glass
    type label ("5MM", "Clear 8 mm").
    """
    raw = thickness
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        label = (glass_type or "").strip()
        match = _THICKNESS_RE.search(label) or _NUMBER_RE.match(label)
        if not match:
            raise ValidationError("Invalid thickness")
        raw = match.group(1)
    elif isinstance(raw, str):
        match = _THICKNESS_RE.search(raw) or _NUMBER_RE.match(raw)
        if not match:
            raise ValidationError("Invalid thickness")
        raw = match.group(1)

    try:
        value = to_decimal(raw, "thickness")
    except ValidationError:
        raise ValidationError("Invalid thickness")
    if value is None or value <= 0:
        raise ValidationError("Invalid thickness")
    return value.quantize(Decimal("0.01"))


def normalize_glass_type(glass_type) -> str:
    label = str(glass_type or "").strip().upper()
    if not label:
        raise ValidationError("glass_type required")
    return label


def parse_positive_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive integer")
    try:
        result = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a positive integer")
    if result <= 0:
        raise ValidationError(f"{field} must be a positive integer")
    return result
