# Overview: Shop registration, login and staff management; bcrypt password hashing.

"""
Authentication Service

Every shop is created together with its first admin. Admins then create
staff accounts for their own shop. Passwords are hashed with bcrypt; the
cost factor comes from BCRYPT_ROUNDS (12 in production).
"""

from __future__ import annotations

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Shop, User, ROLE_ADMIN, ROLE_STAFF
from ..validation import ConflictError, ValidationError, NotFoundError


class PasswordValidationError(Exception):
    """Raised when a password does not meet requirements."""
    pass


class StaffAccessError(Exception):
    """Raised when an admin touches a user of another shop (403)."""
    pass


def validate_password(password: str) -> None:
    min_length = current_app.config.get("PASSWORD_MIN_LENGTH", 4)
    if not isinstance(password, str) or len(password) < min_length:
        raise PasswordValidationError(f"Password must be at least {min_length} characters")


def hash_password(password: str) -> str:
    """Hash password using bcrypt with the configured cost factor."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison; malformed hashes never match."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_role(role: str | None) -> str:
    """'ROLE_ADMIN' / 'admin' / 'Admin' -> 'ADMIN'."""
    value = (role or "").strip().upper()
    if value.startswith("ROLE_"):
        value = value[len("ROLE_"):]
    return value


def get_user_by_username(username: str) -> User | None:
    if not username:
        return None
    return db.session.query(User).filter_by(username=username).first()


def _username_taken(username: str) -> bool:
    return db.session.query(User.id).filter_by(username=username).first() is not None


def register_shop(
    *,
    username: str,
    password: str,
    shop_name: str,
    email: str | None = None,
    owner_name: str | None = None,
    whatsapp_number: str | None = None,
    address: str | None = None,
    gstin: str | None = None,
    state: str | None = None,
) -> tuple[Shop, User]:
    """
    Create a shop and its first ROLE_ADMIN user in one transaction.

    Raises:
        ValidationError: missing username/password/shop name
        PasswordValidationError: password too short
        ConflictError: username already exists
    """
    username = (username or "").strip()
    shop_name = (shop_name or "").strip()
    if not username or not password or not shop_name:
        raise ValidationError("username, password and shop_name required")
    validate_password(password)
    if _username_taken(username):
        raise ConflictError("Username already exists")

    shop = Shop(
        shop_name=shop_name,
        email=(email or "").strip() or None,
        owner_name=(owner_name or "").strip() or None,
        whatsapp_number=(whatsapp_number or "").strip() or None,
        address=(address or "").strip() or None,
        gstin=(gstin or "").strip() or None,
        state=(state or "").strip() or None,
    )
    db.session.add(shop)
    db.session.flush()

    user = User(
        shop_id=shop.id,
        username=username,
        password_hash=hash_password(password),
        role=ROLE_ADMIN,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username already exists")
    return shop, user


def authenticate(username: str, password: str) -> User | None:
    user = get_user_by_username((username or "").strip())
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def create_staff(*, admin: User, username: str, password: str) -> User:
    """Create a ROLE_STAFF user in the admin's shop."""
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("username and password required")
    validate_password(password)
    if _username_taken(username):
        raise ConflictError("Username already exists")

    user = User(
        shop_id=admin.shop_id,
        username=username,
        password_hash=hash_password(password),
        role=ROLE_STAFF,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username already exists")
    return user


def list_staff(shop_id: int) -> list[User]:
    return (
        db.session.query(User)
        .filter_by(shop_id=shop_id, role=ROLE_STAFF)
        .order_by(User.id.asc())
        .all()
    )


def delete_staff(*, admin: User, user_id: int) -> None:
    """
    Remove a staff account.

    Raises:
        NotFoundError: no such user
        StaffAccessError: user belongs to another shop
        ValidationError: target is an admin (including the caller)
    """
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.shop_id != admin.shop_id:
        raise StaffAccessError("Cannot delete staff of another shop")
    if user.role != ROLE_STAFF:
        raise ValidationError("Only staff accounts can be deleted")
    db.session.delete(user)
    db.session.commit()


def change_password(*, user: User, current_password: str, new_password: str) -> None:
    if not current_password or not new_password:
        raise ValidationError("current_password and new_password required")
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    validate_password(new_password)
    user.password_hash = hash_password(new_password)
    db.session.commit()
