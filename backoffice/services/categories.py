"""Repository helpers for single-category menu operations."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.menu.tree import would_create_cycle
from backoffice.models.category import Category
from backoffice.schemas.category import CategoryCreate
from backoffice.services.product_links import count_products_for_category, rename_legacy_links

logger = logging.getLogger(__name__)


class CategoryNotFoundError(Exception):
    """Raised when one or more referenced categories do not exist."""

    def __init__(self, category_ids: str | Iterable[str]) -> None:
        ids = [category_ids] if isinstance(category_ids, str) else list(category_ids)
        if len(ids) == 1:
            message = f"Category '{ids[0]}' not found"
        else:
            message = f"Categories not found: {', '.join(ids)}"
        super().__init__(message)
        self.category_ids = ids


class DuplicateCategoryError(Exception):
    """Raised when a category name or slug is already taken."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"A category with {field} '{value}' already exists")
        self.field = field
        self.value = value


class CategoryHasProductsError(Exception):
    """Raised when deleting a category that still has linked products."""

    def __init__(self, category_id: str, name: str, product_count: int) -> None:
        super().__init__(
            f'Cannot delete category "{name}" because it has {product_count} products '
            "associated with it. Please move or delete these products first."
        )
        self.category_id = category_id
        self.name = name
        self.product_count = product_count


class CategoryHasChildrenError(Exception):
    """Raised when deleting a category that still has subcategories."""

    def __init__(self, category_id: str, child_count: int) -> None:
        super().__init__(
            f"Cannot delete category with {child_count} subcategories. "
            "Please delete or move subcategories first."
        )
        self.category_id = category_id
        self.child_count = child_count


class CategoryCycleError(Exception):
    """Raised when a parent assignment would make a category its own ancestor."""

    def __init__(self, category_id: str, parent_id: str) -> None:
        super().__init__(
            f"Category '{parent_id}' cannot be the parent of '{category_id}': "
            "it would make the category its own ancestor"
        )
        self.category_id = category_id
        self.parent_id = parent_id


class MenuValidationError(Exception):
    """Raised when a menu request is well-formed JSON but semantically invalid."""


_SLUG_INVALID_CHARS = re.compile(r"[^a-z0-9 -]")
_WHITESPACE = re.compile(r"\s+")
_REPEATED_DASHES = re.compile(r"-+")


def slugify(name: str) -> str:
    """Derive a URL-safe slug from a category name."""

    slug = _SLUG_INVALID_CHARS.sub("", name.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _REPEATED_DASHES.sub("-", slug)
    return slug.strip("-")


def _is_unique_violation(exc: IntegrityError, column: str) -> bool:
    error_str = str(exc.orig) if exc.orig else str(exc)
    return f"uq_categories_{column}" in error_str or (
        "UNIQUE constraint failed" in error_str and f"categories.{column}" in error_str
    )


def _raise_for_integrity_error(exc: IntegrityError, *, name: str | None, slug: str | None) -> None:
    if name is not None and _is_unique_violation(exc, "name"):
        raise DuplicateCategoryError("name", name) from exc
    if slug is not None and _is_unique_violation(exc, "slug"):
        raise DuplicateCategoryError("slug", slug) from exc
    raise exc


def get_category(db: Session, category_id: str) -> Optional[Category]:
    """Fetch a category by its ID."""
    return db.get(Category, category_id)


def require_category(db: Session, category_id: str) -> Category:
    """Fetch a category by its ID or raise ``CategoryNotFoundError``."""
    category = get_category(db, category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)
    return category


def get_parent_map(db: Session) -> dict[str, Optional[str]]:
    """Map every category id to its parent id."""
    rows = db.execute(select(Category.id, Category.parent_id)).all()
    return {row.id: row.parent_id for row in rows}


def _ensure_unique(
    db: Session,
    *,
    name: Optional[str] = None,
    slug: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> None:
    if name is not None:
        statement = select(Category.id).where(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            statement = statement.where(Category.id != exclude_id)
        if db.execute(statement).first() is not None:
            raise DuplicateCategoryError("name", name)

    if slug is not None:
        statement = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            statement = statement.where(Category.id != exclude_id)
        if db.execute(statement).first() is not None:
            raise DuplicateCategoryError("slug", slug)


def _validate_parent(db: Session, category_id: Optional[str], parent_id: Optional[str]) -> None:
    if parent_id is None:
        return
    parent_map = get_parent_map(db)
    if parent_id not in parent_map:
        raise CategoryNotFoundError(parent_id)
    if category_id is not None and would_create_cycle(parent_map, category_id, parent_id):
        raise CategoryCycleError(category_id, parent_id)


def _next_menu_order(db: Session, parent_id: Optional[str]) -> int:
    statement = select(func.max(Category.menu_order))
    if parent_id is None:
        statement = statement.where(Category.parent_id.is_(None))
    else:
        statement = statement.where(Category.parent_id == parent_id)
    current_max = db.execute(statement).scalar_one_or_none()
    return 0 if current_max is None else current_max + 1


def create_category(db: Session, category_in: CategoryCreate) -> Category:
    """Create a category positioned after its existing siblings in the menu."""

    slug = category_in.slug or slugify(category_in.name)
    if not slug:
        raise MenuValidationError(f"Cannot derive a slug from category name '{category_in.name}'")

    _ensure_unique(db, name=category_in.name, slug=slug)
    _validate_parent(db, None, category_in.parent_id)

    category = Category(
        name=category_in.name,
        slug=slug,
        description=category_in.description,
        image=category_in.image or None,
        parent_id=category_in.parent_id,
        menu_level=category_in.menu_level,
        menu_order=_next_menu_order(db, category_in.parent_id),
        sort_order=category_in.sort_order,
        is_active=category_in.is_active,
        show_in_menu=True,
    )
    db.add(category)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        _raise_for_integrity_error(exc, name=category_in.name, slug=slug)

    db.refresh(category)
    logger.info("Created category %s (%r) at menu position %d", category.id, category.name, category.menu_order)
    return category


def update_category(db: Session, category_id: str, changes: dict[str, Any]) -> tuple[Category, bool]:
    """Apply a partial update to a category.

    Returns the category and whether anything was written. Renaming a category
    carries its legacy name-linked products along in the same transaction.
    """

    category = require_category(db, category_id)
    if not changes:
        return category, False

    new_name = changes.get("name")
    new_slug = changes.get("slug")
    _ensure_unique(db, name=new_name, slug=new_slug, exclude_id=category.id)
    if "parent_id" in changes:
        _validate_parent(db, category.id, changes["parent_id"])

    old_name = category.name
    try:
        for field, value in changes.items():
            setattr(category, field, value)
        if new_name is not None and new_name != old_name:
            rename_legacy_links(db, old_name, new_name)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        _raise_for_integrity_error(exc, name=new_name, slug=new_slug)
    except Exception:
        db.rollback()
        raise

    db.refresh(category)
    logger.info("Updated category %s fields: %s", category.id, ", ".join(sorted(changes)))
    return category, True


def set_menu_visibility(db: Session, category_id: str, show_in_menu: bool) -> Category:
    """Show or hide a category in the navigation menu."""

    category = require_category(db, category_id)
    category.show_in_menu = show_in_menu
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(category)
    logger.info("Category %s menu visibility set to %s", category.id, show_in_menu)
    return category


def delete_category(db: Session, category_id: str) -> tuple[str, str]:
    """Delete a category that has no products and no subcategories.

    Returns the ``(id, name)`` of the removed category.
    """

    category = require_category(db, category_id)

    product_count = count_products_for_category(db, category)
    if product_count > 0:
        raise CategoryHasProductsError(category.id, category.name, product_count)

    child_count = db.execute(
        select(func.count(Category.id)).where(Category.parent_id == category.id)
    ).scalar_one()
    if child_count > 0:
        raise CategoryHasChildrenError(category.id, child_count)

    deleted = (category.id, category.name)
    db.delete(category)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Deleted category %s (%r)", *deleted)
    return deleted


__all__ = [
    "CategoryCycleError",
    "CategoryHasChildrenError",
    "CategoryHasProductsError",
    "CategoryNotFoundError",
    "DuplicateCategoryError",
    "MenuValidationError",
    "create_category",
    "delete_category",
    "get_category",
    "get_parent_map",
    "require_category",
    "set_menu_visibility",
    "slugify",
    "update_category",
]
