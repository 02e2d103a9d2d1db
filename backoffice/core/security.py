"""Operator password hashing and back office access tokens."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt
from passlib.context import CryptContext

from backoffice.core.config import settings

# Tokens minted here are only accepted by this service.
TOKEN_AUDIENCE = "backoffice-menu"

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    *,
    subject: str,
    role: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign an access token for an operator.

    The token carries the operator id as ``sub``, the service audience, the
    issue and expiry times and, when given, the operator's ``role``. The role
    claim is informational; authorization always re-reads the user row.
    """

    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        "sub": str(subject),
        "aud": TOKEN_AUDIENCE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    if role is not None:
        claims["role"] = role
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry and audience; raises ``JWTError`` otherwise."""

    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=TOKEN_AUDIENCE,
    )


__all__ = [
    "TOKEN_AUDIENCE",
    "create_access_token",
    "decode_access_token",
    "get_password_hash",
    "verify_password",
]
