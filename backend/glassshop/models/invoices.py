from __future__ import annotations

from ..extensions import db
from ..money import money_json
from ..time_utils import to_iso_date, to_utc_z
from .line_items import BillingColumns, GlassLineColumns, PolishSideColumns


class Invoice(BillingColumns, db.Model):
    """
    Bill raised from exactly one CONFIRMED quotation.

    Amounts and lines are copied at creation and never edited afterwards;
    only payments move paid_amount / due_amount / payment_status.
    INVARIANT: paid_amount + due_amount == grand_total.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        db.UniqueConstraint("shop_id", "invoice_number", name="uq_invoices_shop_number"),
        db.UniqueConstraint("quotation_id", name="uq_invoices_quotation"),
        db.Index("ix_invoices_shop_payment_status", "shop_id", "payment_status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    quotation_id = db.Column(db.Integer, db.ForeignKey("quotations.id"), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    invoice_number = db.Column(db.String(32), nullable=False)
    invoice_type = db.Column(db.String(16), nullable=False, default="FINAL")
    invoice_date = db.Column(db.Date, nullable=False)

    payment_status = db.Column(db.String(16), nullable=False, default="DUE")
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    due_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    created_by = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    quotation = db.relationship("Quotation", backref=db.backref("invoice", uselist=False, lazy=True))
    items = db.relationship(
        "InvoiceItem",
        order_by="InvoiceItem.item_order",
        cascade="all, delete-orphan",
        lazy=True,
    )
    payments = db.relationship(
        "Payment",
        order_by="Payment.id",
        cascade="all, delete-orphan",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "shop_id": self.shop_id,
            "quotation_id": self.quotation_id,
            "quotation_number": self.quotation.quotation_number if self.quotation else None,
            "customer_id": self.customer_id,
            "invoice_number": self.invoice_number,
            "invoice_type": self.invoice_type,
            "invoice_date": to_iso_date(self.invoice_date),
            "payment_status": self.payment_status,
            "paid_amount": money_json(self.paid_amount),
            "due_amount": money_json(self.due_amount),
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        data.update(self.billing_dict())
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
            data["payments"] = [p.to_dict() for p in self.payments]
        return data


class InvoiceItem(GlassLineColumns, db.Model):
    __tablename__ = "invoice_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey("invoices.id"), nullable=False, index=True)

    polish_sides = db.relationship(
        "InvoiceItemPolish",
        order_by="InvoiceItemPolish.id",
        cascade="all, delete-orphan",
        lazy=True,
    )

    def to_dict(self) -> dict:
        return self.line_dict()


class InvoiceItemPolish(PolishSideColumns, db.Model):
    __tablename__ = "invoice_item_polish"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    invoice_item_id = db.Column(db.Integer, db.ForeignKey("invoice_items.id"), nullable=False, index=True)


class Payment(db.Model):
    """Immutable receipt against an invoice."""
    __tablename__ = "payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey("invoices.id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_mode = db.Column(db.String(32), nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    reference_number = db.Column(db.String(64), nullable=True)
    bank_name = db.Column(db.String(128), nullable=True)
    cheque_number = db.Column(db.String(64), nullable=True)
    transaction_id = db.Column(db.String(128), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    received_by = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "amount": money_json(self.amount),
            "payment_mode": self.payment_mode,
            "payment_date": to_iso_date(self.payment_date),
            "reference_number": self.reference_number,
            "bank_name": self.bank_name,
            "cheque_number": self.cheque_number,
            "transaction_id": self.transaction_id,
            "notes": self.notes,
            "received_by": self.received_by,
            "created_at": to_utc_z(self.created_at),
        }
