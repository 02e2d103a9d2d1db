"""Request and response envelopes for the menu management API."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, StrictBool, field_validator

from backoffice.schemas.category import CamelModel, CategoryRead

LevelPolicy = Literal["flatten", "preserve"]


class ReorderItem(CamelModel):
    """One entry of a full reorder submission."""

    id: str = Field(..., min_length=1)
    menu_order: int = Field(..., ge=0)
    level: Optional[int] = Field(None, ge=0)
    parent_id: Optional[str] = None
    show_in_menu: Optional[StrictBool] = None

    @property
    def parent_provided(self) -> bool:
        """Whether ``parentId`` was sent, including an explicit null."""
        return "parent_id" in self.model_fields_set


class ReorderRequest(CamelModel):
    """The complete desired order of a (possibly filtered) menu view."""

    items: list[ReorderItem] = Field(..., min_length=1)

    @field_validator("items")
    @classmethod
    def validate_unique_ids(cls, items: list[ReorderItem]) -> list[ReorderItem]:
        """Reject batches that mention the same category twice."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for item in items:
            if item.id in seen:
                duplicates.append(item.id)
            seen.add(item.id)
        if duplicates:
            raise ValueError(f"Duplicate category ids in reorder batch: {', '.join(duplicates)}")
        return items


class SyncRequest(CamelModel):
    """Optional body of a category sync request."""

    level_policy: Optional[LevelPolicy] = None


class MenuMeta(CamelModel):
    total: int
    showing_all: bool


class MenuItemsResponse(CamelModel):
    success: bool = True
    data: list[CategoryRead]
    meta: MenuMeta


class MenuTreeNode(CategoryRead):
    """A category with its nested children."""

    children: list["MenuTreeNode"] = Field(default_factory=list)


MenuTreeNode.model_rebuild()


class MenuTreeResponse(CamelModel):
    success: bool = True
    data: list[MenuTreeNode]
    meta: MenuMeta


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ReorderResult(CamelModel):
    updated: int


class ReorderResponse(MessageResponse):
    data: ReorderResult


class SyncResult(CamelModel):
    total_categories: int
    synced_at: datetime
    level_policy: LevelPolicy


class SyncResponse(MessageResponse):
    data: SyncResult


class CategoryResponse(MessageResponse):
    data: CategoryRead


class VisibilityResult(CamelModel):
    id: str
    name: str
    show_in_menu: bool
    updated_at: datetime


class VisibilityResponse(MessageResponse):
    data: VisibilityResult


class DeletedCategory(CamelModel):
    id: str
    name: str


class DeleteResponse(MessageResponse):
    data: DeletedCategory


class MenuStatusItem(CamelModel):
    id: str
    name: str
    is_active: bool
    show_in_menu: bool
    menu_order: int
    sort_order: int
    will_display: bool


class MenuStatusSummary(CamelModel):
    total: int
    active: int
    inactive: int
    visible_in_menu: int
    hidden_from_menu: int
    displayable_in_frontend: int


class MenuStatusResponse(CamelModel):
    success: bool = True
    summary: MenuStatusSummary
    data: list[MenuStatusItem]


class MenuAuditLogRead(CamelModel):
    id: uuid.UUID
    actor_id: str
    action_type: str
    category_id: Optional[str] = None
    details: Optional[str] = None
    created_at: datetime


class MenuAuditLogResponse(CamelModel):
    success: bool = True
    data: list[MenuAuditLogRead]


__all__ = [
    "CategoryResponse",
    "DeleteResponse",
    "DeletedCategory",
    "LevelPolicy",
    "MenuAuditLogRead",
    "MenuAuditLogResponse",
    "MenuItemsResponse",
    "MenuMeta",
    "MenuStatusItem",
    "MenuStatusResponse",
    "MenuStatusSummary",
    "MenuTreeNode",
    "MenuTreeResponse",
    "MessageResponse",
    "ReorderItem",
    "ReorderRequest",
    "ReorderResponse",
    "ReorderResult",
    "SyncRequest",
    "SyncResponse",
    "SyncResult",
    "VisibilityResponse",
    "VisibilityResult",
]
