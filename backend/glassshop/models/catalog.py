from __future__ import annotations

from ..extensions import db
from ..money import money_json
from ..time_utils import to_utc_z


class Glass(db.Model):
    """
    Global glass catalog keyed by (type, thickness, unit).

    Shared across shops; only Stock and GlassPriceMaster are tenant-owned.
    """
    __tablename__ = "glass"
    __table_args__ = (
        db.UniqueConstraint("type", "thickness", "unit", name="uq_glass_type_thickness_unit"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(64), nullable=False)
    thickness = db.Column(db.Numeric(6, 2), nullable=False)
    unit = db.Column(db.String(16), nullable=False, default="MM")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "thickness": float(self.thickness) if self.thickness is not None else None,
            "unit": self.unit,
        }


class GlassPriceMaster(db.Model):
    """
    Per-shop purchase/selling price for a (glass_type, thickness).

    An entry is pending until a price is supplied; stock of a pending
    entry stays PENDING until an admin prices it.
    """
    __tablename__ = "glass_price_master"
    __table_args__ = (
        db.UniqueConstraint("shop_id", "glass_type", "thickness", name="uq_price_master_shop_type_thickness"),
        db.Index("ix_price_master_shop_pending", "shop_id", "is_pending"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)
    glass_type = db.Column(db.String(64), nullable=False)
    thickness = db.Column(db.Numeric(6, 2), nullable=False)
    hsn_no = db.Column(db.String(32), nullable=True)
    purchase_price = db.Column(db.Numeric(12, 2), nullable=True)
    selling_price = db.Column(db.Numeric(12, 2), nullable=True)
    is_pending = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    @property
    def is_priced(self) -> bool:
        return not self.is_pending and (self.purchase_price is not None or self.selling_price is not None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "glass_type": self.glass_type,
            "thickness": float(self.thickness) if self.thickness is not None else None,
            "hsn_no": self.hsn_no,
            "purchase_price": money_json(self.purchase_price),
            "selling_price": money_json(self.selling_price),
            "is_pending": self.is_pending,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
