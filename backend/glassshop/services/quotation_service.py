# Overview: Quotation pricing (charges, discount, GST split), numbering and confirmation.

"""
Quotation Service

A quotation snapshots the customer, prices every glass line and computes
totals once at creation:

    subtotal    = sum(line subtotals)
    base        = subtotal + installation + transport - discount
    GST billing = base * pct / 100, split CGST/SGST within a state,
                  all IGST across states
    grand_total = base + gst (or base for NON_GST)

Amounts are Decimal and rounded half-up to paise.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Quotation, QuotationItem, QuotationItemPolish, Shop, User
from ..money import ZERO, quantize, to_decimal
from ..time_utils import parse_iso_date, today, utcnow
from ..validation import ValidationError, parse_positive_int
from .concurrency import atomic, run_with_retry
from .customer_service import get_customer
from .document_service import DOC_QUOTATION, next_document_number
from .polish import normalize_unit, parse_polish_sides, running_feet_amount, split_legacy_description, to_feet
from .tenant_service import get_owned, get_shop, scoped_query

logger = logging.getLogger(__name__)


BILLING_GST = "GST"
BILLING_NON_GST = "NON_GST"
BILLING_TYPES = {BILLING_GST, BILLING_NON_GST}

STATUS_DRAFT = "DRAFT"
STATUS_CONFIRMED = "CONFIRMED"
STATUS_REJECTED = "REJECTED"
STATUSES = {STATUS_DRAFT, STATUS_CONFIRMED, STATUS_REJECTED}

DISCOUNT_AMOUNT = "AMOUNT"
DISCOUNT_PERCENTAGE = "PERCENTAGE"

HUNDRED = Decimal("100")


class QuotationStateError(Exception):
    """Raised when a quotation cannot change in its current state (409)."""
    pass


# =============================================================================
# PRICING
# =============================================================================

def is_inter_state(shop_state: str | None, customer_state: str | None) -> bool:
    """Inter-state only when both states are known and differ."""
    if not shop_state or not customer_state:
        return False
    return shop_state.strip().casefold() != customer_state.strip().casefold()


def compute_totals(
    *,
    item_subtotals: list[Decimal],
    billing_type: str = BILLING_GST,
    gst_percentage: Decimal | None = None,
    installation_charge: Decimal | None = None,
    transport_charge: Decimal | None = None,
    discount: Decimal | None = None,
    discount_type: str | None = None,
    discount_value: Decimal | None = None,
    inter_state: bool = False,
) -> dict:
    """
    Pure totals calculation shared by creation and tests.

    A PERCENTAGE discount with no explicit amount is taken as a share of
    the item subtotal.
    """
    subtotal = quantize(sum((Decimal(s) for s in item_subtotals), ZERO))
    installation = quantize(installation_charge or ZERO)
    transport = quantize(transport_charge or ZERO)

    if discount is None and discount_type == DISCOUNT_PERCENTAGE and discount_value is not None:
        discount = subtotal * Decimal(discount_value) / HUNDRED
    discount = quantize(discount or ZERO)

    base = subtotal + installation + transport - discount
    if base < 0:
        raise ValidationError("discount cannot exceed the quotation total")

    totals = {
        "subtotal": subtotal,
        "installation_charge": installation,
        "transport_charge": transport,
        "discount": discount,
        "gst_percentage": None,
        "cgst": None,
        "sgst": None,
        "igst": None,
        "gst_amount": None,
        "grand_total": base,
    }

    # a zero rate means no GST, same as an absent one
    if billing_type == BILLING_GST and gst_percentage:
        gst = quantize(base * Decimal(gst_percentage) / HUNDRED)
        if inter_state:
            cgst = sgst = ZERO
            igst = gst
        else:
            cgst = quantize(gst / 2)
            # odd paise go to SGST so the halves always add back up
            sgst = gst - cgst
            igst = ZERO
        totals.update({
            "gst_percentage": quantize(gst_percentage),
            "cgst": cgst,
            "sgst": sgst,
            "igst": igst,
            "gst_amount": gst,
            "grand_total": base + gst,
        })

    return totals


def _amount(data: dict, key: str, *, allow_negative: bool = False) -> Decimal | None:
    value = to_decimal(data.get(key), key)
    if value is not None and value < 0 and not allow_negative:
        raise ValidationError(f"{key} must be >= 0")
    return value


def _text(raw: dict, key: str, limit: int | None = None) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    value = str(value).strip()
    if limit and len(value) > limit:
        raise ValidationError(f"{key} exceeds max length {limit}")
    return value or None


def parse_item(raw: dict, position: int) -> dict:
    """
    Validate one glass line into plain values (no ORM objects, so the
    caller can rebuild rows on retry).
    """
    if not isinstance(raw, dict):
        raise ValidationError("items must be objects")

    height = _amount(raw, "height")
    width = _amount(raw, "width")
    if not height or not width:
        raise ValidationError(f"Item {position + 1}: height and width must be positive")
    height_unit = normalize_unit(raw.get("height_unit"))
    width_unit = normalize_unit(raw.get("width_unit"))
    quantity = parse_positive_int(raw.get("quantity", 1), "quantity")
    rate = _amount(raw, "rate_per_sqft") or ZERO

    description, legacy_rows, legacy_rates, legacy_label = split_legacy_description(_text(raw, "description"))
    if raw.get("polish_sides") is not None:
        sides = parse_polish_sides(raw.get("polish_sides"), raw.get("polish_rates"))
    else:
        sides = parse_polish_sides(legacy_rows, legacy_rates)

    area = _amount(raw, "area")
    if area is None:
        area = to_feet(height, height_unit) * to_feet(width, width_unit)
    subtotal = _amount(raw, "subtotal")
    if subtotal is None:
        subtotal = area * rate * quantity

    thickness = raw.get("thickness")
    return {
        "glass_type": (_text(raw, "glass_type", 64) or "").upper() or None,
        "thickness": str(thickness).strip() if thickness not in (None, "") else None,
        "height": quantize(height),
        "width": quantize(width),
        "height_unit": height_unit,
        "width_unit": width_unit,
        "design": _text(raw, "design", 64),
        "quantity": quantity,
        "rate_per_sqft": quantize(rate),
        "area": quantize(area),
        "subtotal": quantize(subtotal),
        "hsn_code": _text(raw, "hsn_code", 32),
        "description": description,
        "polish": _text(raw, "polish", 16) or legacy_label,
        "running_ft": running_feet_amount(
            height=height, width=width,
            height_unit=height_unit, width_unit=width_unit,
            quantity=quantity, sides=sides,
        ),
        "item_order": position,
        "polish_sides": sides,
    }


def _build_item(values: dict) -> QuotationItem:
    values = dict(values)
    sides = values.pop("polish_sides")
    item = QuotationItem(**values)
    item.polish_sides = [QuotationItemPolish(**side) for side in sides]
    return item


# =============================================================================
# CREATION
# =============================================================================

def create_quotation(shop_id: int, actor: User, data: dict) -> Quotation:
    """
    Price and persist a quotation for one of the shop's customers.

    Raises:
        ValidationError: malformed input
        TenantAccessError: customer missing or owned by another shop
    """
    data = data or {}
    if data.get("customer_id") in (None, ""):
        raise ValidationError("customer_id required")
    customer = get_customer(shop_id, parse_positive_int(data["customer_id"], "customer_id"))
    shop: Shop = get_shop(shop_id)

    raw_items = data.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("At least one item is required")
    items = [parse_item(raw, i) for i, raw in enumerate(raw_items)]

    billing_type = (data.get("billing_type") or BILLING_GST).strip().upper()
    if billing_type not in BILLING_TYPES:
        raise ValidationError("billing_type must be GST or NON_GST")

    gst_percentage = _amount(data, "gst_percentage")
    if gst_percentage is not None and gst_percentage > HUNDRED:
        raise ValidationError("gst_percentage must be between 0 and 100")

    discount_type = (data.get("discount_type") or "").strip().upper() or None
    if discount_type not in (None, DISCOUNT_AMOUNT, DISCOUNT_PERCENTAGE):
        raise ValidationError("discount_type must be AMOUNT or PERCENTAGE")
    discount_value = _amount(data, "discount_value")
    if discount_type == DISCOUNT_PERCENTAGE and discount_value is not None and discount_value > HUNDRED:
        raise ValidationError("discount_value must be between 0 and 100")

    try:
        quotation_date = parse_iso_date(data.get("quotation_date")) or today()
        valid_until = parse_iso_date(data.get("valid_until"))
    except ValueError:
        raise ValidationError("Dates must be YYYY-MM-DD")

    customer_state = (data.get("customer_state") or customer.state or None)
    totals = compute_totals(
        item_subtotals=[i["subtotal"] for i in items],
        billing_type=billing_type,
        gst_percentage=gst_percentage if billing_type == BILLING_GST else None,
        installation_charge=_amount(data, "installation_charge"),
        transport_charge=_amount(data, "transport_charge"),
        discount=_amount(data, "discount"),
        discount_type=discount_type,
        discount_value=discount_value,
        inter_state=is_inter_state(shop.state, customer_state),
    )

    def _op() -> Quotation:
        quotation = Quotation(
            shop_id=shop_id,
            customer_id=customer.id,
            quotation_number=next_document_number(shop_id=shop_id, document_type=DOC_QUOTATION),
            version=1,
            status=STATUS_DRAFT,
            billing_type=billing_type,
            quotation_date=quotation_date,
            valid_until=valid_until,
            customer_name=customer.name,
            customer_mobile=customer.mobile,
            customer_address=customer.address,
            customer_gstin=customer.gstin,
            customer_state=customer_state,
            transportation_required=bool(data.get("transportation_required")),
            discount_type=discount_type,
            discount_value=quantize(discount_value),
            created_by=actor.username,
            **totals,
        )
        quotation.items = [_build_item(values) for values in items]
        db.session.add(quotation)
        db.session.flush()
        return quotation

    quotation = run_with_retry(lambda: atomic(_op), retry_on=(IntegrityError,))
    logger.info("Created quotation %s shop=%s total=%s", quotation.quotation_number, shop_id, quotation.grand_total)
    return quotation


# =============================================================================
# QUERIES
# =============================================================================

def list_quotations(shop_id: int, status: str | None = None) -> list[Quotation]:
    q = scoped_query(Quotation, shop_id)
    if status:
        status = status.strip().upper()
        if status not in STATUSES:
            raise ValidationError(f"status must be one of {sorted(STATUSES)}")
        q = q.filter(Quotation.status == status)
    return q.order_by(Quotation.created_at.desc(), Quotation.id.desc()).all()


def get_quotation(shop_id: int, quotation_id: int) -> Quotation:
    return get_owned(Quotation, quotation_id, shop_id, "Quotation")


# =============================================================================
# STATUS
# =============================================================================

def _wants_confirmation(data: dict) -> bool:
    action = str(data.get("action") or "").strip().upper()
    if action:
        return action == STATUS_CONFIRMED
    return data.get("confirmed") is True


def set_confirmation(shop_id: int, actor: User, quotation_id: int, data: dict) -> Quotation:
    """
    CONFIRMED when the body says so ({"action": "CONFIRMED"} or
    {"confirmed": true}); anything else rejects, keeping the reason.
    The decision can be changed until an invoice is raised.
    """
    data = data or {}
    quotation = get_quotation(shop_id, quotation_id)
    if quotation.invoice is not None:
        raise QuotationStateError("Quotation is already invoiced")

    if _wants_confirmation(data):
        quotation.status = STATUS_CONFIRMED
        quotation.confirmed_at = utcnow()
        quotation.confirmed_by = actor.username
        quotation.rejection_reason = None
    else:
        quotation.status = STATUS_REJECTED
        quotation.confirmed_at = None
        quotation.confirmed_by = None
        quotation.rejection_reason = (str(data.get("rejection_reason") or "").strip() or None)
    db.session.commit()
    return quotation


def delete_quotation(shop_id: int, quotation_id: int) -> None:
    quotation = get_quotation(shop_id, quotation_id)
    if quotation.invoice is not None:
        raise QuotationStateError("Quotation is already invoiced")
    db.session.delete(quotation)
    db.session.commit()
