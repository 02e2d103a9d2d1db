"""Authentication API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.api.dependencies import get_db, require_active_user
from backoffice.core.auth_provider import Principal
from backoffice.core.security import create_access_token
from backoffice.schemas.auth import PrincipalRead, TokenResponse, UserLogin
from backoffice.services.users import authenticate_user


router = APIRouter(tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login_user(payload: UserLogin, db: Session = Depends(get_db)) -> TokenResponse:
    """Authenticate an operator by email/password and return a JWT token."""

    user = authenticate_user(db, payload.email, payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    token = create_access_token(subject=str(user.id), role=user.role)
    return TokenResponse(access_token=token)


@router.get("/me", response_model=PrincipalRead)
def read_current_user(principal: Principal = Depends(require_active_user)) -> PrincipalRead:
    """Return the identity the request is acting as."""

    return PrincipalRead.model_validate(principal)


__all__ = ["router"]
