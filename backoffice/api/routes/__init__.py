"""API route modules."""

from . import auth
from . import menu_management

__all__ = ["auth", "menu_management"]
