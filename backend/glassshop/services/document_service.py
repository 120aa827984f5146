# Overview: Per-shop document number allocation for quotations and invoices.

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db
from ..models import DocumentSequence


DOC_QUOTATION = "QUOTATION"
DOC_INVOICE = "INVOICE"
DOC_ADVANCE_INVOICE = "ADVANCE_INVOICE"

PREFIXES = {
    DOC_QUOTATION: "QTN",
    DOC_INVOICE: "INV",
    DOC_ADVANCE_INVOICE: "ADV",
}


class DocumentSequenceError(Exception):
    """Raised when document sequence operations fail."""
    pass


def _current_value(shop_id: int, document_type: str) -> int:
    return (
        db.session.query(DocumentSequence.next_number)
        .filter_by(shop_id=shop_id, document_type=document_type)
        .scalar()
    )


def next_document_number(
    *,
    shop_id: int,
    document_type: str,
    pad: int = 5,
) -> str:
    """
    Allocate the next document number for a shop/type inside the caller's
    transaction.

    The counter row is bumped with a single UPDATE so concurrent callers
    serialize on it; the first allocation for a shop creates the row. The
    caller commits (or rolls back, which also releases the number).
    """
    if not shop_id:
        raise DocumentSequenceError("shop_id is required")
    prefix = PREFIXES.get(document_type)
    if not prefix:
        raise DocumentSequenceError(f"Unknown document type: {document_type}")

    stmt = (
        update(DocumentSequence)
        .where(
            DocumentSequence.shop_id == shop_id,
            DocumentSequence.document_type == document_type,
        )
        .values(next_number=DocumentSequence.next_number + 1)
    )

    result = db.session.execute(stmt)
    if result.rowcount:
        next_num = _current_value(shop_id, document_type) - 1
    else:
        seq = DocumentSequence(shop_id=shop_id, document_type=document_type, next_number=2)
        db.session.add(seq)
        # A concurrent first allocation surfaces as IntegrityError here; callers
        # retry and take the UPDATE path.
        db.session.flush()
        next_num = 1

    return f"{prefix}-{shop_id:03d}-{next_num:0{pad}d}"
