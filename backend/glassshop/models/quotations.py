from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z
from .line_items import BillingColumns, GlassLineColumns, PolishSideColumns


class Quotation(BillingColumns, db.Model):
    """
    Priced offer to a customer. DRAFT until an admin confirms or rejects it;
    only CONFIRMED quotations can be converted into an invoice.
    """
    __tablename__ = "quotations"
    __table_args__ = (
        db.UniqueConstraint("shop_id", "quotation_number", name="uq_quotations_shop_number"),
        db.Index("ix_quotations_shop_status", "shop_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    quotation_number = db.Column(db.String(32), nullable=False)
    version = db.Column(db.Integer, nullable=False, default=1)
    status = db.Column(db.String(16), nullable=False, default="DRAFT")

    quotation_date = db.Column(db.Date, nullable=False)
    valid_until = db.Column(db.Date, nullable=True)

    confirmed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    confirmed_by = db.Column(db.String(64), nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    items = db.relationship(
        "QuotationItem",
        order_by="QuotationItem.item_order",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "shop_id": self.shop_id,
            "customer_id": self.customer_id,
            "quotation_number": self.quotation_number,
            "version": self.version,
            "status": self.status,
            "quotation_date": to_iso_date(self.quotation_date),
            "valid_until": to_iso_date(self.valid_until),
            "confirmed_at": to_utc_z(self.confirmed_at),
            "confirmed_by": self.confirmed_by,
            "rejection_reason": self.rejection_reason,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        data.update(self.billing_dict())
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class QuotationItem(GlassLineColumns, db.Model):
    __tablename__ = "quotation_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    quotation_id = db.Column(db.Integer, db.ForeignKey("quotations.id"), nullable=False, index=True)

    polish_sides = db.relationship(
        "QuotationItemPolish",
        order_by="QuotationItemPolish.id",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def to_dict(self) -> dict:
        return self.line_dict()


class QuotationItemPolish(PolishSideColumns, db.Model):
    __tablename__ = "quotation_item_polish"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    quotation_item_id = db.Column(db.Integer, db.ForeignKey("quotation_items.id"), nullable=False, index=True)
