"""Client-side helpers for working with the menu API."""

from .api import MenuApiClient, MenuApiError
from .editor import Alert, DragState, EditorBusyError, MenuEditor

__all__ = ["Alert", "DragState", "EditorBusyError", "MenuApiClient", "MenuApiError", "MenuEditor"]
