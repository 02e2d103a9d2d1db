"""Service functions for the menu audit trail."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.models.menu_audit_log import MenuAuditLog


def record_menu_action(
    db: Session,
    actor_id: str,
    action_type: str,
    category_id: Optional[str] = None,
    details: Optional[str] = None,
) -> MenuAuditLog:
    """Create a new menu audit log entry."""

    audit_log = MenuAuditLog(
        actor_id=actor_id,
        action_type=action_type,
        category_id=category_id,
        details=details,
    )

    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)

    return audit_log


def list_menu_actions(db: Session, limit: int = 50) -> List[MenuAuditLog]:
    """Fetch the most recent menu audit entries, newest first."""

    statement = (
        select(MenuAuditLog)
        .order_by(MenuAuditLog.created_at.desc())
        .limit(limit)
    )
    result = db.execute(statement)
    return list(result.scalars().all())


__all__ = [
    "list_menu_actions",
    "record_menu_action",
]
