"""Repository helpers for interacting with back-office operator records."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.core.security import get_password_hash, verify_password
from backoffice.models.user import User
from backoffice.schemas.auth import UserCreate

logger = logging.getLogger(__name__)


class UserEmailAlreadyExistsError(Exception):
    """Raised when attempting to create a user with an email that already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"A user with email '{email}' already exists")
        self.email = email


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Fetch a user by email address."""

    normalized_email = _normalize_email(email)
    statement = select(User).where(User.email == normalized_email)
    result = db.execute(statement)
    return result.scalar_one_or_none()


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    """Fetch a user by id, returning ``None`` for malformed ids."""

    try:
        uuid_id = uuid.UUID(str(user_id))
    except ValueError:
        return None
    return db.get(User, uuid_id)


def create_user(db: Session, user_in: UserCreate) -> User:
    """Create a new operator with a hashed password."""

    normalized_email = _normalize_email(str(user_in.email))
    if get_user_by_email(db, normalized_email) is not None:
        raise UserEmailAlreadyExistsError(normalized_email)

    user = User(
        email=normalized_email,
        full_name=user_in.full_name or None,
        hashed_password=get_password_hash(user_in.password),
        role=user_in.role,
    )

    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise UserEmailAlreadyExistsError(normalized_email) from exc

    db.refresh(user)
    logger.info("Created %s user %s", user.role, user.email)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the active user matching the credentials, or ``None``."""

    user = get_user_by_email(db, email)
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def set_user_role(db: Session, user: User, role: str) -> User:
    """Change an operator's role."""

    user.role = role
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s is now %s", user.email, role)
    return user


__all__ = [
    "UserEmailAlreadyExistsError",
    "authenticate_user",
    "create_user",
    "set_user_role",
    "get_user_by_email",
    "get_user_by_id",
]
