"""Application schema exports."""

from .auth import PrincipalRead, TokenResponse, UserCreate, UserLogin
from .category import CategoryCreate, CategoryRead, CategoryUpdate, VisibilityToggle
from .menu import ReorderItem, ReorderRequest, SyncRequest

__all__ = [
    "CategoryCreate",
    "CategoryRead",
    "CategoryUpdate",
    "PrincipalRead",
    "ReorderItem",
    "ReorderRequest",
    "SyncRequest",
    "TokenResponse",
    "UserCreate",
    "UserLogin",
    "VisibilityToggle",
]
