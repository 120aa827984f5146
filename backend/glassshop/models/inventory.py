from __future__ import annotations

from ..extensions import db
from ..money import money_json
from ..time_utils import to_utc_z


class Stock(db.Model):
    """
    Quantity of one glass on one stand of one shop, optionally per cut size.

    Prices and status are denormalized from the shop's price master at the
    time of the last stock movement (or price-master cascade).
    """
    __tablename__ = "stock"
    __table_args__ = (
        db.UniqueConstraint(
            "glass_id", "stand_no", "shop_id", "height", "width",
            name="uq_stock_glass_stand_shop_size",
        ),
        db.Index("ix_stock_shop_status", "shop_id", "status"),
        db.Index("ix_stock_shop_updated", "shop_id", "updated_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    glass_id = db.Column(db.Integer, db.ForeignKey("glass.id"), nullable=False, index=True)
    stand_no = db.Column(db.Integer, nullable=False)
    height = db.Column(db.String(32), nullable=True)
    width = db.Column(db.String(32), nullable=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    min_quantity = db.Column(db.Integer, nullable=False, default=5)

    hsn_no = db.Column(db.String(32), nullable=True)
    purchase_price = db.Column(db.Numeric(12, 2), nullable=True)
    selling_price = db.Column(db.Numeric(12, 2), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="APPROVED")

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    glass = db.relationship("Glass", lazy="joined")
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "glass": self.glass.to_dict() if self.glass else None,
            "stand_no": self.stand_no,
            "height": self.height,
            "width": self.width,
            "quantity": self.quantity,
            "min_quantity": self.min_quantity,
            "hsn_no": self.hsn_no,
            "purchase_price": money_json(self.purchase_price),
            "selling_price": money_json(self.selling_price),
            "status": self.status,
            "updated_at": to_utc_z(self.updated_at),
        }


class StockHistory(db.Model):
    """Append-only record of every stock movement."""
    __tablename__ = "stock_history"
    __table_args__ = (
        db.Index("ix_stock_history_shop_created", "shop_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False)
    glass_id = db.Column(db.Integer, db.ForeignKey("glass.id"), nullable=False)
    stand_no = db.Column(db.Integer, nullable=False)
    to_stand_no = db.Column(db.Integer, nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    action = db.Column(db.String(16), nullable=False)
    username = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "glass_id": self.glass_id,
            "stand_no": self.stand_no,
            "to_stand_no": self.to_stand_no,
            "quantity": self.quantity,
            "action": self.action,
            "username": self.username,
            "created_at": to_utc_z(self.created_at),
        }
