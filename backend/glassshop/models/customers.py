from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z


class Customer(db.Model):
    """
    Customer contact record, scoped to a shop.

    Quotations copy name/mobile/address/GSTIN/state at creation time, so
    edits here never rewrite issued documents.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_shop_name", "shop_id", "name"),
        db.Index("ix_customers_shop_mobile", "shop_id", "mobile"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    mobile = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)
    gstin = db.Column(db.String(32), nullable=True)
    state = db.Column(db.String(64), nullable=True)
    city = db.Column(db.String(64), nullable=True)
    pincode = db.Column(db.String(16), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "name": self.name,
            "mobile": self.mobile,
            "email": self.email,
            "address": self.address,
            "gstin": self.gstin,
            "state": self.state,
            "city": self.city,
            "pincode": self.pincode,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Site(db.Model):
    """A customer's work site where glass gets installed."""
    __tablename__ = "sites"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship(
        "Customer",
        backref=db.backref("sites", lazy=True, cascade="all, delete-orphan"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "name": self.name,
            "address": self.address,
            "created_at": to_utc_z(self.created_at),
        }


class Installation(db.Model):
    """Installation job for an invoice at one of the customer's sites."""
    __tablename__ = "installations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey("invoices.id"), nullable=False, index=True)
    site_id = db.Column(db.Integer, db.ForeignKey("sites.id"), nullable=False)
    scheduled_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(16), nullable=False, default="SCHEDULED")
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    site = db.relationship("Site", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "site": self.site.to_dict() if self.site else None,
            "scheduled_date": to_iso_date(self.scheduled_date),
            "status": self.status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
