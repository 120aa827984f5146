from __future__ import annotations

from ..extensions import db
from ..money import money_json
from ..time_utils import to_utc_z


class AuditLog(db.Model):
    """
    Append-only who-did-what trail for stock movements.

    Denormalized on purpose: the row stays readable after the glass or
    stock row it describes changes.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("ix_audit_logs_shop_ts", "shop_id", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False)
    username = db.Column(db.String(64), nullable=True)
    role = db.Column(db.String(32), nullable=True)
    action = db.Column(db.String(16), nullable=False)
    glass_type = db.Column(db.String(64), nullable=True)
    thickness = db.Column(db.Numeric(6, 2), nullable=True)
    unit = db.Column(db.String(16), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    stand_no = db.Column(db.Integer, nullable=True)
    from_stand = db.Column(db.Integer, nullable=True)
    to_stand = db.Column(db.Integer, nullable=True)
    height = db.Column(db.String(32), nullable=True)
    width = db.Column(db.String(32), nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=True)

    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "username": self.username,
            "role": self.role,
            "action": self.action,
            "glass_type": self.glass_type,
            "thickness": float(self.thickness) if self.thickness is not None else None,
            "unit": self.unit,
            "quantity": self.quantity,
            "stand_no": self.stand_no,
            "from_stand": self.from_stand,
            "to_stand": self.to_stand,
            "height": self.height,
            "width": self.width,
            "price": money_json(self.price),
            "timestamp": to_utc_z(self.timestamp),
        }
