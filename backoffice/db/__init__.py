"""Database helpers and base exports."""

from .base import Base
from .session import SessionLocal, engine, get_db, verify_connection

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "verify_connection",
]
