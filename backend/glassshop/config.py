# backend/glassshop/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite file by default; Postgres/MySQL via DATABASE_URL
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///glassshop.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Server databases get a bounded pool: 5 idle connections, 10 at peak.
    DB_POOL_SIZE = _int_env("DB_POOL_SIZE", 5)
    DB_MAX_OVERFLOW = _int_env("DB_MAX_OVERFLOW", 5)

    JWT_SECRET = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me")
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRATION_HOURS = _int_env("JWT_EXPIRATION_HOURS", 24)

    BCRYPT_ROUNDS = _int_env("BCRYPT_ROUNDS", 12)
    PASSWORD_MIN_LENGTH = _int_env("PASSWORD_MIN_LENGTH", 4)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CORS_ALLOWED_ORIGINS = tuple(
        o.strip()
        for o in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if o.strip()
    )


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET = "test-jwt-secret"
    # bcrypt's minimum cost keeps the suite fast
    BCRYPT_ROUNDS = 4


def engine_options_for(uri: str, pool_size: int, max_overflow: int) -> dict:
    """SQLite ignores pool sizing; everything else gets the bounded pool."""
    if uri.startswith("sqlite"):
        return {}
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
    }
