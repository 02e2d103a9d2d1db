"""Service layer exports."""

from .categories import (
    CategoryCycleError,
    CategoryHasChildrenError,
    CategoryHasProductsError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    MenuValidationError,
    create_category,
    delete_category,
    set_menu_visibility,
    slugify,
    update_category,
)
from .menu import build_menu_tree, list_menu_items, menu_status, reorder_menu, sync_categories
from .menu_audit import list_menu_actions, record_menu_action
from .product_links import backfill_category_ids
from .users import UserEmailAlreadyExistsError, authenticate_user, create_user, get_user_by_email

__all__ = [
    "CategoryCycleError",
    "CategoryHasChildrenError",
    "CategoryHasProductsError",
    "CategoryNotFoundError",
    "DuplicateCategoryError",
    "MenuValidationError",
    "UserEmailAlreadyExistsError",
    "authenticate_user",
    "backfill_category_ids",
    "build_menu_tree",
    "create_category",
    "create_user",
    "delete_category",
    "get_user_by_email",
    "list_menu_actions",
    "list_menu_items",
    "menu_status",
    "record_menu_action",
    "reorder_menu",
    "set_menu_visibility",
    "slugify",
    "sync_categories",
    "update_category",
]
