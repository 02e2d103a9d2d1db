"""Public API package exports."""

from .dependencies import require_active_user, require_menu_editor
from backoffice.api.routes.auth import router as auth_router
from backoffice.api.routes.menu_management import router as menu_management_router

__all__ = ["auth_router", "menu_management_router", "require_active_user", "require_menu_editor"]
