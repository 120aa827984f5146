# Overview: Edge-polish selection for glass lines and the running-feet charge it implies.

"""
Each glass piece has four edges (two heights, two widths). Any edge can be
polished plain (P), half-round (H) or bevelled (B), each with a per-foot
rate. The running-feet charge is

    quantity * sum(edge length in feet * rate) over polished edges

Older clients embedded the selection as "POLISH_DATA:{json}" at the end of
the line description; split_legacy_description() turns that into the
structured rows and strips it from the text.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal

from ..money import quantize, to_decimal
from ..validation import ValidationError

logger = logging.getLogger(__name__)


SIDES = ("HEIGHT_1", "WIDTH_1", "HEIGHT_2", "WIDTH_2")
POLISH_TYPES = ("P", "H", "B")
DEFAULT_RATES = {"P": Decimal("15"), "H": Decimal("75"), "B": Decimal("75")}

UNIT_TO_FEET = {
    "FEET": Decimal("1"),
    "FT": Decimal("1"),
    "INCH": Decimal("1") / Decimal("12"),
    "IN": Decimal("1") / Decimal("12"),
    "MM": Decimal("1") / Decimal("304.8"),
    "CM": Decimal("1") / Decimal("30.48"),
}

LEGACY_MARKER = "POLISH_DATA:"


def normalize_unit(unit) -> str:
    value = (str(unit).strip().upper() if unit else "") or "FEET"
    if value not in UNIT_TO_FEET:
        raise ValidationError(f"Unsupported unit: {unit}")
    return value


def to_feet(value: Decimal, unit: str) -> Decimal:
    return Decimal(value) * UNIT_TO_FEET[normalize_unit(unit)]


def _side_for(raw_side, position: int) -> str:
    if raw_side:
        label = str(raw_side).strip().upper().replace(" ", "_")
        for side in SIDES:
            if label.startswith(side):
                return side
    if position < len(SIDES):
        return SIDES[position]
    raise ValidationError("A glass piece has only four polishable sides")


def parse_polish_sides(raw, rates: dict | None = None) -> list[dict]:
    """
    Normalize a client polish selection into [{side, polish_type, rate}].

    Accepts either structured rows ({"side", "polish_type", "rate"}) or the
    older four-row shape ({"side": "Height 1 (24)", "checked", "type",
    "rate"}) where position decides the side. Unchecked or untyped rows are
    dropped.
    """
    if raw in (None, ""):
        return []
    if not isinstance(raw, list):
        raise ValidationError("polish_sides must be a list")

    effective_rates = dict(DEFAULT_RATES)
    for key, value in (rates or {}).items():
        if str(key).upper() in POLISH_TYPES and value not in (None, ""):
            effective_rates[str(key).upper()] = to_decimal(value, "polish rate")

    sides: list[dict] = []
    seen: set[str] = set()
    for position, row in enumerate(raw):
        if not isinstance(row, dict):
            raise ValidationError("polish_sides entries must be objects")
        if row.get("checked") is False:
            continue
        polish_type = row.get("polish_type") or row.get("type")
        if not polish_type:
            continue
        polish_type = str(polish_type).strip().upper()
        if polish_type not in POLISH_TYPES:
            raise ValidationError(f"polish_type must be one of {', '.join(POLISH_TYPES)}")

        side = _side_for(row.get("side"), position)
        if side in seen:
            raise ValidationError(f"Duplicate polish side: {side}")
        seen.add(side)

        rate = to_decimal(row.get("rate"), "polish rate")
        if rate is None or rate == 0:
            rate = effective_rates[polish_type]
        if rate < 0:
            raise ValidationError("polish rate must be >= 0")
        sides.append({"side": side, "polish_type": polish_type, "rate": quantize(rate)})
    return sides


def running_feet_amount(
    *,
    height: Decimal,
    width: Decimal,
    height_unit: str,
    width_unit: str,
    quantity: int,
    sides: list[dict],
) -> Decimal | None:
    if not sides:
        return None
    height_ft = to_feet(height, height_unit)
    width_ft = to_feet(width, width_unit)
    total = Decimal("0")
    for row in sides:
        length = height_ft if row["side"].startswith("HEIGHT") else width_ft
        total += length * Decimal(row["rate"])
    return quantize(total * quantity)


def split_legacy_description(description: str | None) -> tuple[str | None, list | None, dict | None, str | None]:
    """
    Pull a trailing "POLISH_DATA:{json}" blob out of a description.

    Returns (clean_description, selection_rows, rates, polish_label). When
    no blob is present the description comes back untouched and the other
    three values are None. A malformed blob is left in the text.
    """
    if not description or LEGACY_MARKER not in description:
        return description, None, None, None

    text, _, blob = description.rpartition(LEGACY_MARKER)
    try:
        data = json.loads(blob)
    except ValueError:
        logger.warning("Ignoring malformed legacy polish data")
        return description, None, None, None
    if not isinstance(data, dict):
        return description, None, None, None

    clean = text.strip() or None
    label = data.get("itemPolish") or None
    return clean, data.get("polishSelection") or [], data.get("polishRates") or {}, label
