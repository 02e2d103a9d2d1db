"""Whole-menu queries and batch operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.menu.tree import build_hierarchy, would_create_cycle
from backoffice.models.category import Category
from backoffice.schemas.category import CategoryRead
from backoffice.schemas.menu import (
    LevelPolicy,
    MenuStatusItem,
    MenuStatusSummary,
    MenuTreeNode,
    ReorderItem,
)
from backoffice.services.categories import (
    CategoryCycleError,
    CategoryNotFoundError,
    MenuValidationError,
    get_parent_map,
)
from backoffice.services.product_links import product_count_subquery

logger = logging.getLogger(__name__)

LEVEL_POLICIES: tuple[str, ...] = ("flatten", "preserve")


@dataclass(frozen=True)
class SyncOutcome:
    total_categories: int
    synced_at: datetime
    level_policy: LevelPolicy


def list_menu_items(db: Session, *, show_all: bool = False) -> list[CategoryRead]:
    """Return categories in menu order, with product counts.

    Without ``show_all`` only active categories that are shown in the menu are
    returned; with it every category is listed.
    """

    product_count = product_count_subquery()
    active_product_count = product_count_subquery(active_only=True)

    statement = select(Category, product_count, active_product_count)
    if not show_all:
        statement = statement.where(Category.show_in_menu.is_(True), Category.is_active.is_(True))
    statement = statement.order_by(Category.menu_order, Category.menu_level, Category.name)

    items: list[CategoryRead] = []
    for category, count, active_count in db.execute(statement).all():
        item = CategoryRead.model_validate(category)
        items.append(
            item.model_copy(
                update={"product_count": int(count or 0), "active_product_count": int(active_count or 0)}
            )
        )
    return items


def build_menu_tree(db: Session, *, show_all: bool = False) -> list[MenuTreeNode]:
    """Nest the menu listing by parent.

    Categories whose parent is not part of the listing (hidden, inactive or
    missing) are left out together with their descendants.
    """

    items = [item.model_dump(by_alias=True) for item in list_menu_items(db, show_all=show_all)]
    return [MenuTreeNode.model_validate(node) for node in build_hierarchy(items)]


def count_tree_nodes(nodes: list[MenuTreeNode]) -> int:
    """Number of categories in a nested tree, children included."""

    return sum(1 + count_tree_nodes(node.children) for node in nodes)


def menu_status(db: Session) -> tuple[MenuStatusSummary, list[MenuStatusItem]]:
    """Diagnostic view of which categories will appear in the storefront menu."""

    categories = db.execute(select(Category).order_by(Category.menu_order, Category.name)).scalars().all()

    rows = [
        MenuStatusItem(
            id=category.id,
            name=category.name,
            is_active=category.is_active,
            show_in_menu=category.show_in_menu,
            menu_order=category.menu_order,
            sort_order=category.sort_order,
            will_display=category.is_active and category.show_in_menu,
        )
        for category in categories
    ]
    active = sum(1 for row in rows if row.is_active)
    visible = sum(1 for row in rows if row.show_in_menu)
    summary = MenuStatusSummary(
        total=len(rows),
        active=active,
        inactive=len(rows) - active,
        visible_in_menu=visible,
        hidden_from_menu=len(rows) - visible,
        displayable_in_frontend=sum(1 for row in rows if row.will_display),
    )
    return summary, rows


def reorder_menu(db: Session, items: Sequence[ReorderItem]) -> int:
    """Apply a reorder batch atomically.

    Every referenced category and parent must exist and the resulting parent
    links must stay acyclic; otherwise nothing is written. Returns the number
    of categories updated.
    """

    if not items:
        raise MenuValidationError("Items array is required")

    ids = [item.id for item in items]
    categories = {
        category.id: category
        for category in db.execute(select(Category).where(Category.id.in_(ids))).scalars()
    }
    missing = [category_id for category_id in ids if category_id not in categories]
    if missing:
        raise CategoryNotFoundError(missing)

    parent_map = get_parent_map(db)
    missing_parents = sorted(
        {
            item.parent_id
            for item in items
            if item.parent_provided and item.parent_id is not None and item.parent_id not in parent_map
        }
    )
    if missing_parents:
        raise CategoryNotFoundError(missing_parents)

    proposed = dict(parent_map)
    for item in items:
        if item.parent_provided:
            proposed[item.id] = item.parent_id
    for item in items:
        if not item.parent_provided or item.parent_id is None:
            continue
        # the category itself is already re-pointed in ``proposed``; walk from its new parent
        if would_create_cycle(proposed, item.id, item.parent_id):
            raise CategoryCycleError(item.id, item.parent_id)

    try:
        for item in items:
            category = categories[item.id]
            category.menu_order = item.menu_order
            if item.level is not None:
                category.menu_level = item.level
            if item.parent_provided:
                category.parent_id = item.parent_id
            if item.show_in_menu is not None:
                category.show_in_menu = item.show_in_menu
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Menu reorder of %d item(s) failed; rolled back", len(items))
        raise

    logger.info("Reordered %d menu item(s)", len(items))
    return len(items)


def sync_categories(db: Session, level_policy: Optional[LevelPolicy] = None) -> SyncOutcome:
    """Reset the menu from the categories' catalogue sort order.

    All active categories are made visible and get ``menuOrder = sortOrder``
    in a single statement. Under the ``flatten`` policy their ``menuLevel`` is
    reset to 0; ``preserve`` leaves levels alone. Parent links are untouched.
    """

    policy = level_policy or settings.menu_sync_level_policy
    if policy not in LEVEL_POLICIES:
        raise MenuValidationError(f"Unknown level policy '{policy}'")

    values = {"show_in_menu": True, "menu_order": Category.sort_order}
    if policy == "flatten":
        values["menu_level"] = 0

    statement = (
        update(Category)
        .where(Category.is_active.is_(True))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.execute(statement)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Category sync failed; rolled back")
        raise

    total = result.rowcount or 0
    logger.info("Synced %d active categories into the menu (level policy: %s)", total, policy)
    return SyncOutcome(total_categories=total, synced_at=datetime.now(timezone.utc), level_policy=policy)


__all__ = [
    "LEVEL_POLICIES",
    "SyncOutcome",
    "build_menu_tree",
    "count_tree_nodes",
    "list_menu_items",
    "menu_status",
    "reorder_menu",
    "sync_categories",
]
