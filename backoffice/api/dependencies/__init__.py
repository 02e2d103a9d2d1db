"""API dependency exports."""

from backoffice.db.session import get_db

from .auth import get_auth_provider, get_optional_user, require_active_user, require_menu_editor

__all__ = [
    "get_auth_provider",
    "get_db",
    "get_optional_user",
    "require_active_user",
    "require_menu_editor",
]
