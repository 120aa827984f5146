# Overview: Read side of the stock audit trail.

from __future__ import annotations

from ..models import AuditLog
from .stock_service import ACTION_TRANSFER
from .tenant_service import scoped_query


RECENT_AUDIT_LIMIT = 100


def recent_entries(shop_id: int, limit: int = RECENT_AUDIT_LIMIT) -> list[AuditLog]:
    return (
        scoped_query(AuditLog, shop_id)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )


def transfer_count(shop_id: int) -> int:
    return scoped_query(AuditLog, shop_id).filter(AuditLog.action == ACTION_TRANSFER).count()
