# Overview: Stateless bearer tokens (HS256 JWT) carrying username and role.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app


EXTENSION_KEY = "glassshop.tokens"


class AuthError(Exception):
    """Raised when a bearer token is missing, malformed, forged or expired."""
    pass


@dataclass(frozen=True)
class TokenClaims:
    username: str
    role: str
    expires_at: datetime


class TokenService:
    """
    Issues and verifies signed tokens.

    Built once per app from configuration and kept in app.extensions, so
    the signing secret is injected instead of read from the environment at
    call time. There is no server-side session store: a token stays valid
    until it expires.
    """

    def __init__(self, secret: str, expiration_hours: int = 24, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self._secret = secret
        self._algorithm = algorithm
        self.expiration = timedelta(hours=expiration_hours)

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            secret=config["JWT_SECRET"],
            expiration_hours=config.get("JWT_EXPIRATION_HOURS", 24),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def issue(self, username: str, role: str, *, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": username,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self.expiration,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")

        username = payload.get("sub")
        if not isinstance(username, str) or not username:
            raise AuthError("Invalid token")
        return TokenClaims(
            username=username,
            role=str(payload.get("role") or ""),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


def get_token_service() -> TokenService:
    return current_app.extensions[EXTENSION_KEY]
