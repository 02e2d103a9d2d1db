"""SQLAlchemy declarative base for ORM models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Import model modules so SQLAlchemy registers the mappers during startup.
from backoffice.models import (  # noqa: E402,F401
    category,
    menu_audit_log,
    product,
    user,
)


__all__ = ["Base"]
