from __future__ import annotations

from ..extensions import db


class DocumentSequence(db.Model):
    """
    Per-shop, per-type counter for quotation and invoice numbers.

    Numbers are allocated by an atomic UPDATE and never handed out twice,
    even when the document that consumed one is later deleted.
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("shop_id", "document_type", name="uq_document_sequences_shop_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False)
    document_type = db.Column(db.String(32), nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
