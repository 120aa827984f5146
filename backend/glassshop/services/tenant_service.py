"""
Tenant scoping helpers.

Every authenticated request carries the caller's shop in g.shop_id. Any
lookup by id goes through these helpers so a foreign shop's row answers
exactly like a missing one: 404, never 403, never a hint that it exists.
"""

from __future__ import annotations

from flask import g

from ..extensions import db
from ..models import Shop
from ..validation import NotFoundError


class TenantAccessError(NotFoundError):
    """Raised when a row is missing or belongs to a different shop."""
    pass


def get_current_shop_id() -> int:
    """Shop of the authenticated user; set by require_auth."""
    shop_id = getattr(g, "shop_id", None)
    if shop_id is None:
        raise TenantAccessError("Tenant context not established")
    return shop_id


def get_shop(shop_id: int) -> Shop:
    shop = db.session.get(Shop, shop_id)
    if not shop:
        raise TenantAccessError("Shop not found")
    return shop


def scoped_query(model, shop_id: int):
    """Query for model restricted to one shop."""
    return db.session.query(model).filter(model.shop_id == shop_id)


def get_owned(model, row_id: int, shop_id: int, label: str | None = None, query=None):
    """
    Load model row_id for shop_id or raise TenantAccessError.

    Pass query to add options (e.g. a row lock) before the lookup.
    """
    q = query if query is not None else scoped_query(model, shop_id)
    row = q.filter(model.id == row_id).first()
    if not row:
        raise TenantAccessError(f"{label or model.__name__} not found")
    return row
