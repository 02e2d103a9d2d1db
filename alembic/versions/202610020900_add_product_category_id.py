"""Link products to categories by id

Revision ID: 202610020900
Revises: 202610010920
Create Date: 2026-10-02 09:00:00.000000

Adds ``products.category_id`` and fills it for every product whose legacy
``category`` string matches a category name. Rows that do not match keep a
NULL ``category_id`` and are still counted by name while
``LEGACY_CATEGORY_NAME_LINKS`` is enabled.
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "202610020900"
down_revision = "202610010920"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("products") as batch_op:
        batch_op.add_column(sa.Column("category_id", sa.String(length=36), nullable=True))
        batch_op.create_foreign_key(
            "fk_products_category_id_categories",
            "categories",
            ["category_id"],
            ["id"],
        )
        batch_op.create_index("ix_products_category_id", ["category_id"], unique=False)

    op.execute(
        """
        UPDATE products
        SET category_id = (
            SELECT categories.id FROM categories WHERE categories.name = products.category
        )
        WHERE category_id IS NULL
          AND category IS NOT NULL
          AND EXISTS (
            SELECT 1 FROM categories WHERE categories.name = products.category
          )
        """
    )


def downgrade() -> None:
    with op.batch_alter_table("products") as batch_op:
        batch_op.drop_index("ix_products_category_id")
        batch_op.drop_constraint("fk_products_category_id_categories", type_="foreignkey")
        batch_op.drop_column("category_id")
