# Overview: Decimal helpers for rupee amounts stored as NUMERIC(12,2).

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value, field: str = "amount") -> Decimal | None:
    """
    Coerce JSON input into a Decimal.

    Floats go through str() so 0.1 stays 0.1 rather than its binary expansion.
    Booleans are rejected even though they are ints.
    """
    from .validation import ValidationError

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a number")
    return result


def quantize(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def money_json(value: Decimal | None) -> float | None:
    """JSON clients receive amounts as numbers with two decimals."""
    if value is None:
        return None
    return float(quantize(value))


def format_rupees(value: Decimal | None) -> str:
    if value is None:
        return "-"
    return f"Rs. {quantize(value):,.2f}"
