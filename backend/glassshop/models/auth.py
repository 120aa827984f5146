from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


ROLE_ADMIN = "ROLE_ADMIN"
ROLE_STAFF = "ROLE_STAFF"


class User(db.Model):
    """
    Shop user. Usernames are globally unique because the bearer token
    carries only the username as its subject.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_shop_id", "shop_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False)
    username = db.Column(db.String(64), nullable=False, unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, default=ROLE_STAFF)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    shop = db.relationship("Shop", backref=db.backref("users", lazy=True))

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role}>"

    def to_dict(self) -> dict:
        # password_hash never leaves the server
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "shop_id": self.shop_id,
            "created_at": to_utc_z(self.created_at),
        }
