"""Category to product link lookups.

Products point at their category through ``category_id``. Rows created before
that column existed only carry the category *name* in ``Product.category``;
while ``LEGACY_CATEGORY_NAME_LINKS`` is enabled those rows are still counted by
name. Everything in the menu core that needs product membership goes through
this module.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from backoffice.core.config import settings
from backoffice.models.category import Category
from backoffice.models.product import Product

logger = logging.getLogger(__name__)


def _legacy_enabled(legacy_name_links: Optional[bool]) -> bool:
    if legacy_name_links is None:
        return settings.legacy_category_name_links
    return legacy_name_links


def product_link_clause(*, legacy_name_links: Optional[bool] = None) -> ColumnElement[bool]:
    """SQL predicate matching products that belong to the correlated ``Category`` row."""

    by_id = Product.category_id == Category.id
    if not _legacy_enabled(legacy_name_links):
        return by_id
    by_name = and_(Product.category_id.is_(None), Product.category == Category.name)
    return or_(by_id, by_name)


def product_count_subquery(*, active_only: bool = False, legacy_name_links: Optional[bool] = None):
    """Correlated scalar subquery counting products for each selected category."""

    statement = select(func.count(Product.id)).where(
        product_link_clause(legacy_name_links=legacy_name_links)
    )
    if active_only:
        statement = statement.where(Product.is_active.is_(True))
    return statement.correlate(Category).scalar_subquery()


def count_products_for_category(
    db: Session,
    category: Category,
    *,
    active_only: bool = False,
    legacy_name_links: Optional[bool] = None,
) -> int:
    """Number of products linked to ``category``, optionally only active ones."""

    conditions = [Product.category_id == category.id]
    if _legacy_enabled(legacy_name_links):
        conditions.append(and_(Product.category_id.is_(None), Product.category == category.name))
    statement = select(func.count(Product.id)).where(or_(*conditions))
    if active_only:
        statement = statement.where(Product.is_active.is_(True))
    return int(db.execute(statement).scalar_one())


def rename_legacy_links(db: Session, old_name: str, new_name: str) -> int:
    """Point name-linked products at a renamed category. Does not commit."""

    if old_name == new_name:
        return 0
    result = db.execute(
        update(Product)
        .where(Product.category == old_name)
        .values(category=new_name)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        logger.info(
            "Rewrote legacy category name on %d product(s): %r -> %r",
            result.rowcount,
            old_name,
            new_name,
        )
    return result.rowcount or 0


def backfill_category_ids(db: Session) -> int:
    """Resolve legacy name links into ``category_id`` foreign keys.

    Returns the number of products that received a ``category_id``.
    """

    matching_category = select(Category.id).where(Category.name == Product.category)
    try:
        result = db.execute(
            update(Product)
            .where(
                Product.category_id.is_(None),
                Product.category.is_not(None),
                matching_category.exists(),
            )
            .values(category_id=matching_category.scalar_subquery())
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    updated = result.rowcount or 0
    logger.info("Backfilled category_id on %d product(s)", updated)
    return updated


__all__ = [
    "backfill_category_ids",
    "count_products_for_category",
    "product_count_subquery",
    "product_link_clause",
    "rename_legacy_links",
]
