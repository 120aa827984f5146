# Overview: Per-shop glass price master and its reconciliation with stock rows.

"""
Glass Price Master Service

A price-master entry prices one (glass_type, thickness) for one shop.
Entries without prices are "pending": staff may already move stock of that
glass, but those stock rows stay PENDING until an admin prices the entry.

SYNC RULES:
- pending -> priced: every matching stock row of the shop becomes APPROVED
  with the entry's prices (and priced entries keep rows in sync on edit)
- priced -> pending, or a priced entry deleted: rows fall back to PENDING
  with no prices
- a pending entry deleted: the shop's PENDING rows for it are deleted
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Glass, GlassPriceMaster, Stock
from ..money import quantize
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    ValidationError,
    normalize_glass_type,
    parse_thickness,
    validate_payload,
)
from .tenant_service import get_owned, scoped_query

logger = logging.getLogger(__name__)


STATUS_APPROVED = "APPROVED"
STATUS_PENDING = "PENDING"

DUPLICATE_ENTRY_MESSAGE = "Entry already exists for this glass type and thickness"

PRICE_POLICY = ModelValidationPolicy(
    writable_fields={"hsn_no", "purchase_price", "selling_price"},
)


def derive_stock_pricing(entry: GlassPriceMaster | None) -> dict:
    """Stock-row fields implied by a price-master entry (or its absence)."""
    if entry is not None and entry.is_priced:
        return {
            "status": STATUS_APPROVED,
            "purchase_price": entry.purchase_price,
            "selling_price": entry.selling_price,
            "hsn_no": entry.hsn_no,
        }
    return {
        "status": STATUS_PENDING,
        "purchase_price": None,
        "selling_price": None,
        "hsn_no": entry.hsn_no if entry is not None else None,
    }


def find_entry(shop_id: int, glass_type: str, thickness: Decimal) -> GlassPriceMaster | None:
    return (
        scoped_query(GlassPriceMaster, shop_id)
        .filter(
            GlassPriceMaster.glass_type == glass_type,
            GlassPriceMaster.thickness == thickness,
        )
        .first()
    )


def get_or_create_pending_entry(shop_id: int, glass_type: str, thickness: Decimal) -> GlassPriceMaster:
    """
    Entry for (shop, type, thickness), created pending when missing.

    Flushes only; the caller owns the transaction.
    """
    entry = find_entry(shop_id, glass_type, thickness)
    if entry is None:
        entry = GlassPriceMaster(
            shop_id=shop_id,
            glass_type=glass_type,
            thickness=thickness,
            is_pending=True,
        )
        db.session.add(entry)
        db.session.flush()
        logger.info("Created pending price entry shop=%s %s/%smm", shop_id, glass_type, thickness)
    return entry


def matching_stock_query(shop_id: int, glass_type: str, thickness: Decimal):
    glass_ids = (
        db.session.query(Glass.id)
        .filter(Glass.type == glass_type, Glass.thickness == thickness)
    )
    return scoped_query(Stock, shop_id).filter(Stock.glass_id.in_(glass_ids))


def sync_stock_rows(shop_id: int, glass_type: str, thickness: Decimal, entry: GlassPriceMaster | None) -> int:
    """Apply the entry's pricing to every matching stock row of the shop."""
    fields = derive_stock_pricing(entry)
    rows = matching_stock_query(shop_id, glass_type, thickness).all()
    for row in rows:
        row.status = fields["status"]
        row.purchase_price = fields["purchase_price"]
        row.selling_price = fields["selling_price"]
        if fields["hsn_no"] is not None:
            row.hsn_no = fields["hsn_no"]
    if rows:
        logger.info(
            "Synced %d stock rows shop=%s %s/%smm -> %s",
            len(rows), shop_id, glass_type, thickness, fields["status"],
        )
    return len(rows)


def _validated_prices(data: dict) -> dict:
    patch = validate_payload(
        model=GlassPriceMaster,
        payload={k: data.get(k) for k in PRICE_POLICY.writable_fields if k in data},
        policy=PRICE_POLICY,
        partial=True,
    )
    for key in ("purchase_price", "selling_price"):
        if patch.get(key) is not None:
            if patch[key] < 0:
                raise ValidationError(f"{key} must be >= 0")
            patch[key] = quantize(patch[key])
    return patch


def _key_from(data: dict) -> tuple[str, Decimal]:
    if data.get("glass_type") in (None, "") or data.get("thickness") in (None, ""):
        raise ValidationError("glass_type and thickness required")
    return normalize_glass_type(data["glass_type"]), parse_thickness(data["thickness"])


def list_entries(shop_id: int, pending_only: bool = False) -> list[GlassPriceMaster]:
    q = scoped_query(GlassPriceMaster, shop_id)
    if pending_only:
        q = q.filter(GlassPriceMaster.is_pending.is_(True))
    return q.order_by(GlassPriceMaster.glass_type.asc(), GlassPriceMaster.thickness.asc()).all()


def get_entry(shop_id: int, entry_id: int) -> GlassPriceMaster:
    return get_owned(GlassPriceMaster, entry_id, shop_id, "Price entry")


def lookup(shop_id: int, glass_type: str, thickness) -> GlassPriceMaster | None:
    return find_entry(shop_id, normalize_glass_type(glass_type), parse_thickness(thickness))


def create_entry(shop_id: int, data: dict) -> GlassPriceMaster:
    glass_type, thickness = _key_from(data)
    prices = _validated_prices(data)
    if find_entry(shop_id, glass_type, thickness) is not None:
        raise ConflictError(DUPLICATE_ENTRY_MESSAGE)

    entry = GlassPriceMaster(
        shop_id=shop_id,
        glass_type=glass_type,
        thickness=thickness,
        hsn_no=prices.get("hsn_no"),
        purchase_price=prices.get("purchase_price"),
        selling_price=prices.get("selling_price"),
    )
    entry.is_pending = entry.purchase_price is None and entry.selling_price is None
    db.session.add(entry)
    try:
        db.session.flush()
        if not entry.is_pending:
            sync_stock_rows(shop_id, glass_type, thickness, entry)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(DUPLICATE_ENTRY_MESSAGE)
    return entry


def update_entry(shop_id: int, entry_id: int, data: dict) -> GlassPriceMaster:
    """
    Overwrite an entry. Prices not supplied are cleared, so a PUT without
    prices turns the entry back into a pending one.
    """
    entry = get_entry(shop_id, entry_id)
    old_key = (entry.glass_type, entry.thickness)

    if data.get("glass_type") not in (None, "") or data.get("thickness") not in (None, ""):
        new_key = _key_from({
            "glass_type": data.get("glass_type") or entry.glass_type,
            "thickness": data.get("thickness") if data.get("thickness") not in (None, "") else entry.thickness,
        })
    else:
        new_key = old_key

    if new_key != old_key:
        clash = find_entry(shop_id, *new_key)
        if clash is not None and clash.id != entry.id:
            raise ConflictError(DUPLICATE_ENTRY_MESSAGE)

    prices = _validated_prices(data)
    entry.glass_type, entry.thickness = new_key
    entry.purchase_price = prices.get("purchase_price")
    entry.selling_price = prices.get("selling_price")
    if "hsn_no" in prices:
        entry.hsn_no = prices["hsn_no"]
    entry.is_pending = entry.purchase_price is None and entry.selling_price is None
    try:
        db.session.flush()
        if new_key != old_key:
            sync_stock_rows(shop_id, *old_key, None)
        sync_stock_rows(shop_id, *new_key, entry)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(DUPLICATE_ENTRY_MESSAGE)
    return entry


def delete_entry(shop_id: int, entry_id: int) -> int:
    """
    Delete an entry. Returns the number of stock rows deleted (pending
    entries only; priced entries leave their rows behind as PENDING).
    """
    entry = get_entry(shop_id, entry_id)
    key = (entry.glass_type, entry.thickness)
    deleted = 0

    if entry.is_pending:
        rows = (
            matching_stock_query(shop_id, *key)
            .filter(Stock.status == STATUS_PENDING)
            .all()
        )
        for row in rows:
            db.session.delete(row)
        deleted = len(rows)
        logger.info("Deleted %d pending stock rows for %s/%smm shop=%s", deleted, key[0], key[1], shop_id)
    else:
        sync_stock_rows(shop_id, *key, None)

    db.session.delete(entry)
    db.session.commit()
    return deleted
