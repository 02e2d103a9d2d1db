"""Pluggable identity resolution for protected routes.

The active provider is chosen once from ``AUTH_PROVIDER``. The fixture
provider hands out a configured identity without checking any credentials and
is only ever used when selected explicitly.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from jose import JWTError
from sqlalchemy.orm import Session

from backoffice.core.config import Settings, settings as default_settings
from backoffice.core.security import decode_access_token
from backoffice.services.users import get_user_by_id

logger = logging.getLogger(__name__)

ROLES: tuple[str, ...] = ("admin", "manager", "staff")
MENU_EDITOR_ROLES: frozenset[str] = frozenset({"admin", "manager"})


class AuthenticationError(Exception):
    """Raised when a request carries no usable identity."""


@dataclass(frozen=True)
class Principal:
    """The identity a request acts as."""

    id: str
    email: str
    role: str

    @property
    def can_edit_menu(self) -> bool:
        return self.role in MENU_EDITOR_ROLES


class AuthProvider(ABC):
    """Turns a bearer token into a ``Principal``."""

    name: str = ""

    @abstractmethod
    def resolve(self, token: Optional[str], db: Session) -> Principal:
        """Return the principal for ``token`` or raise ``AuthenticationError``."""


class JWTAuthProvider(AuthProvider):
    """Validates signed access tokens against the ``users`` table."""

    name = "jwt"

    def resolve(self, token: Optional[str], db: Session) -> Principal:
        if not token:
            raise AuthenticationError("Not authenticated.")

        try:
            payload = decode_access_token(token)
        except JWTError as exc:
            raise AuthenticationError("Could not validate credentials.") from exc

        subject = payload.get("sub")
        if subject is None:
            raise AuthenticationError("Could not validate credentials.")

        user = get_user_by_id(db, str(subject))
        if user is None or not user.is_active:
            raise AuthenticationError("Could not validate credentials.")

        return Principal(id=str(user.id), email=user.email, role=user.role)


class FixtureAuthProvider(AuthProvider):
    """Resolves every request to one configured identity."""

    name = "fixture"

    def __init__(self, principal: Principal) -> None:
        self.principal = principal

    def resolve(self, token: Optional[str], db: Session) -> Principal:
        return self.principal


def build_auth_provider(config: Settings | None = None) -> AuthProvider:
    """Instantiate the provider named by ``AUTH_PROVIDER``."""

    config = config or default_settings
    if config.auth_provider == "jwt":
        return JWTAuthProvider()
    if config.auth_provider == "fixture":
        logger.warning(
            "AUTH_PROVIDER=fixture: every request is treated as %s (%s)",
            config.fixture_user_email,
            config.fixture_user_role,
        )
        return FixtureAuthProvider(
            Principal(
                id=config.fixture_user_id,
                email=config.fixture_user_email,
                role=config.fixture_user_role,
            )
        )
    raise ValueError(f"Unknown auth provider '{config.auth_provider}'")


__all__ = [
    "AuthProvider",
    "AuthenticationError",
    "FixtureAuthProvider",
    "JWTAuthProvider",
    "MENU_EDITOR_ROLES",
    "Principal",
    "ROLES",
    "build_auth_provider",
]
