"""Authentication dependencies for API routes."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from backoffice.core.auth_provider import AuthProvider, AuthenticationError, Principal, build_auth_provider
from backoffice.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_auth_provider(request: Request) -> AuthProvider:
    """Return the provider configured for this application."""

    provider = getattr(request.app.state, "auth_provider", None)
    if provider is None:
        provider = build_auth_provider()
        request.app.state.auth_provider = provider
    return provider


def _credentials_exception(detail: str = "Could not validate credentials.") -> HTTPException:
    """Return a standardised HTTP 401 exception for auth failures."""

    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_active_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
    provider: Annotated[AuthProvider, Depends(get_auth_provider)],
) -> Principal:
    """Resolve the request's principal or fail with 401."""

    try:
        return provider.resolve(token, db)
    except AuthenticationError as exc:
        raise _credentials_exception(str(exc)) from exc


def require_menu_editor(
    principal: Annotated[Principal, Depends(require_active_user)],
) -> Principal:
    """Check the principal may change the menu, otherwise raise 403."""

    if not principal.can_edit_menu:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Menu management requires the admin or manager role.",
        )
    return principal


def get_optional_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
    provider: Annotated[AuthProvider, Depends(get_auth_provider)],
) -> Optional[Principal]:
    """Resolve the principal when credentials are usable, else ``None``."""

    try:
        return provider.resolve(token, db)
    except AuthenticationError:
        return None


__all__ = [
    "get_auth_provider",
    "get_optional_user",
    "oauth2_scheme",
    "require_active_user",
    "require_menu_editor",
]
