"""Authentication-related Pydantic schemas."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Role = Literal["admin", "manager", "staff"]


class UserCreate(BaseModel):
    """Schema for provisioning a back-office operator."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: Optional[str] = None
    role: Role = "staff"

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class UserLogin(BaseModel):
    """Schema for logging in with email and password."""

    email: EmailStr
    password: str

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class PrincipalRead(BaseModel):
    """Schema representing the identity attached to the current request."""

    id: str
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True, frozen=True)


class TokenResponse(BaseModel):
    """Schema for returning an access token to the client."""

    access_token: str
    token_type: str = "bearer"

    model_config = ConfigDict(frozen=True)


__all__ = [
    "PrincipalRead",
    "Role",
    "TokenResponse",
    "UserCreate",
    "UserLogin",
]
