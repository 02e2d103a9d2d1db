"""Create menu audit logs table"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "202610030900"
down_revision = "202610020900"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "menu_audit_logs",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("actor_id", sa.String(length=64), nullable=False),
        sa.Column("action_type", sa.String(length=64), nullable=False),
        sa.Column("category_id", sa.String(length=36), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_menu_audit_logs_created_at", "menu_audit_logs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_menu_audit_logs_created_at", table_name="menu_audit_logs")
    op.drop_table("menu_audit_logs")
