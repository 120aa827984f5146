from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Shop(db.Model):
    """
    Multi-tenant root: every tenant is a Shop.

    All users, stock, price-master entries, customers, quotations and
    invoices belong to exactly one shop. No data may cross shop boundaries;
    the only shared rows are the global Glass catalog.
    """
    __tablename__ = "shops"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    shop_name = db.Column(db.String(255), nullable=False)
    owner_name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    whatsapp_number = db.Column(db.String(32), nullable=True)
    address = db.Column(db.Text, nullable=True)
    gstin = db.Column(db.String(32), nullable=True)
    # Place of supply for GST; compared against the customer's state
    state = db.Column(db.String(64), nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Shop id={self.id} name={self.shop_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_name": self.shop_name,
            "owner_name": self.owner_name,
            "email": self.email,
            "whatsapp_number": self.whatsapp_number,
            "address": self.address,
            "gstin": self.gstin,
            "state": self.state,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
