# Overview: Stand-level stock movements reconciled against the shop's price master.

"""
Stock Service

Each movement (ADD, REMOVE, TRANSFER) resolves the glass in the global
catalog, reconciles the stock row's prices/status with the shop's price
master, changes quantities and appends one StockHistory row plus one
AuditLog row, all in a single transaction.

CONCURRENCY:
- stock rows are read with SELECT ... FOR UPDATE and carry a version column
- the whole movement is retried on lock, version or create-race failures
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import AuditLog, Glass, Stock, StockHistory, User
from ..time_utils import utcnow
from ..validation import (
    NotFoundError,
    ValidationError,
    normalize_glass_type,
    parse_positive_int,
    parse_thickness,
)
from .concurrency import atomic, lock_for_update, run_with_retry
from .price_master_service import derive_stock_pricing, get_or_create_pending_entry
from .tenant_service import scoped_query


ACTION_ADD = "ADD"
ACTION_REMOVE = "REMOVE"
ACTION_TRANSFER = "TRANSFER"

VALID_ACTIONS = {ACTION_ADD, ACTION_REMOVE}

DEFAULT_MIN_QUANTITY = 5
DEFAULT_UNIT = "MM"
RECENT_LIMIT = 3


class InsufficientStockError(Exception):
    """Raised when a transfer asks for more than the source stand holds."""
    pass


def normalize_size(value) -> str | None:
    """
    Cut sizes are stored as text; numeric input is canonicalized so 24,
    24.0 and "24" address the same stock row.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return text.upper()
    if number == number.to_integral_value():
        return str(int(number))
    return format(number.normalize(), "f")


def _normalize_unit(unit) -> str:
    return (str(unit).strip().upper() if unit else "") or DEFAULT_UNIT


def find_glass(glass_type: str, thickness: Decimal, unit: str) -> Glass | None:
    return (
        db.session.query(Glass)
        .filter_by(type=glass_type, thickness=thickness, unit=unit)
        .first()
    )


def resolve_glass(glass_type: str, thickness: Decimal, unit: str) -> Glass:
    """Catalog row for (type, thickness, unit), created on first use."""
    glass = find_glass(glass_type, thickness, unit)
    if glass is None:
        glass = Glass(type=glass_type, thickness=thickness, unit=unit)
        db.session.add(glass)
        db.session.flush()
    return glass


def locked_stock_query(shop_id: int, glass_id: int, stand_no: int, height, width):
    # Stock eager-joins Glass; lock the stock row only
    return lock_for_update(
        scoped_query(Stock, shop_id).filter_by(
            glass_id=glass_id, stand_no=stand_no, height=height, width=width,
        ),
        of=Stock,
    )


def _locked_stock(shop_id: int, glass_id: int, stand_no: int, height, width) -> Stock | None:
    return locked_stock_query(shop_id, glass_id, stand_no, height, width).first()


def _apply_pricing(stock: Stock, pricing: dict) -> None:
    stock.status = pricing["status"]
    stock.purchase_price = pricing["purchase_price"]
    stock.selling_price = pricing["selling_price"]
    if pricing["hsn_no"] is not None:
        stock.hsn_no = pricing["hsn_no"]


def _parse_movement(glass_type, thickness, quantity, unit):
    label = normalize_glass_type(glass_type)
    return (
        label,
        parse_thickness(thickness, label),
        parse_positive_int(quantity, "quantity"),
        _normalize_unit(unit),
    )


def update_stock(
    *,
    shop_id: int,
    actor: User,
    glass_type: str,
    stand_no,
    quantity,
    action: str,
    thickness=None,
    height=None,
    width=None,
    unit: str | None = None,
) -> Stock:
    """
    ADD or REMOVE glass on one stand.

    REMOVE never drives the quantity below zero; asking to remove more than
    is on the stand empties it.

    Raises:
        ValidationError: bad thickness/quantity/stand/action (before any write)
    """
    label, thick, qty, unit = _parse_movement(glass_type, thickness, quantity, unit)
    stand = parse_positive_int(stand_no, "stand_no")
    action = (action or "").strip().upper()
    if action not in VALID_ACTIONS:
        raise ValidationError("action must be ADD or REMOVE")
    height, width = normalize_size(height), normalize_size(width)

    def _op() -> Stock:
        entry = get_or_create_pending_entry(shop_id, label, thick)
        pricing = derive_stock_pricing(entry)
        glass = resolve_glass(label, thick, unit)

        stock = _locked_stock(shop_id, glass.id, stand, height, width)
        if stock is None:
            stock = Stock(
                shop_id=shop_id,
                glass_id=glass.id,
                stand_no=stand,
                height=height,
                width=width,
                quantity=0,
                min_quantity=DEFAULT_MIN_QUANTITY,
            )
            db.session.add(stock)

        _apply_pricing(stock, pricing)
        if action == ACTION_ADD:
            stock.quantity = (stock.quantity or 0) + qty
        else:
            stock.quantity = max(0, (stock.quantity or 0) - qty)
        stock.updated_at = utcnow()
        db.session.flush()

        db.session.add(StockHistory(
            shop_id=shop_id,
            glass_id=glass.id,
            stand_no=stand,
            quantity=qty,
            action=action,
            username=actor.username,
        ))
        db.session.add(AuditLog(
            shop_id=shop_id,
            username=actor.username,
            role=actor.role,
            action=action,
            glass_type=label,
            thickness=thick,
            unit=unit,
            quantity=qty,
            stand_no=stand,
            height=height,
            width=width,
            price=stock.selling_price,
        ))
        return stock

    return run_with_retry(lambda: atomic(_op), retry_on=(IntegrityError,))


def transfer_stock(
    *,
    shop_id: int,
    actor: User,
    glass_type: str,
    from_stand,
    to_stand,
    quantity,
    thickness=None,
    height=None,
    width=None,
    unit: str | None = None,
) -> tuple[Stock, Stock]:
    """
    Move quantity between two stands of the same shop.

    Nothing changes unless the whole move succeeds.

    Raises:
        ValidationError: bad input, or source and destination are the same stand
        NotFoundError: glass not in the catalog
        InsufficientStockError: source missing or holding less than quantity
    """
    label, thick, qty, unit = _parse_movement(glass_type, thickness, quantity, unit)
    source_stand = parse_positive_int(from_stand, "from_stand")
    dest_stand = parse_positive_int(to_stand, "to_stand")
    if source_stand == dest_stand:
        raise ValidationError("from_stand and to_stand must differ")
    height, width = normalize_size(height), normalize_size(width)

    def _op() -> tuple[Stock, Stock]:
        glass = find_glass(label, thick, unit)
        if glass is None:
            raise NotFoundError("Glass type not found")

        source = _locked_stock(shop_id, glass.id, source_stand, height, width)
        if source is None or source.quantity < qty:
            raise InsufficientStockError("Insufficient stock in source stand")

        entry = get_or_create_pending_entry(shop_id, label, thick)
        pricing = derive_stock_pricing(entry)

        dest = _locked_stock(shop_id, glass.id, dest_stand, height, width)
        if dest is None:
            dest = Stock(
                shop_id=shop_id,
                glass_id=glass.id,
                stand_no=dest_stand,
                height=height,
                width=width,
                quantity=0,
                min_quantity=source.min_quantity,
                hsn_no=source.hsn_no,
            )
            db.session.add(dest)

        now = utcnow()
        for row in (source, dest):
            _apply_pricing(row, pricing)
            row.updated_at = now
        source.quantity -= qty
        dest.quantity = (dest.quantity or 0) + qty
        db.session.flush()

        db.session.add(StockHistory(
            shop_id=shop_id,
            glass_id=glass.id,
            stand_no=source_stand,
            to_stand_no=dest_stand,
            quantity=qty,
            action=ACTION_TRANSFER,
            username=actor.username,
        ))
        db.session.add(AuditLog(
            shop_id=shop_id,
            username=actor.username,
            role=actor.role,
            action=ACTION_TRANSFER,
            glass_type=label,
            thickness=thick,
            unit=unit,
            quantity=qty,
            from_stand=source_stand,
            to_stand=dest_stand,
            height=height,
            width=width,
            price=source.selling_price,
        ))
        return source, dest

    return run_with_retry(lambda: atomic(_op), retry_on=(IntegrityError,))


def list_stock(shop_id: int) -> list[Stock]:
    return (
        scoped_query(Stock, shop_id)
        .order_by(Stock.stand_no.asc(), Stock.id.asc())
        .all()
    )


def recent_stock(shop_id: int, limit: int = RECENT_LIMIT) -> list[Stock]:
    return (
        scoped_query(Stock, shop_id)
        .order_by(Stock.updated_at.desc(), Stock.id.desc())
        .limit(limit)
        .all()
    )


def low_stock(shop_id: int) -> list[Stock]:
    return (
        scoped_query(Stock, shop_id)
        .filter(Stock.quantity <= Stock.min_quantity)
        .order_by(Stock.quantity.asc(), Stock.id.asc())
        .all()
    )
