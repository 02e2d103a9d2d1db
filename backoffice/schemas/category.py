"""Pydantic schemas for categories as exposed through the menu API.

JSON payloads use camelCase keys (``menuOrder``, ``showInMenu``...) while the
Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising to and accepting camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CategoryRead(CamelModel):
    """Schema for reading a category together with its derived product counts."""

    id: str
    name: str
    slug: str
    description: str
    image: Optional[str] = None
    is_active: bool
    sort_order: int
    menu_order: int
    show_in_menu: bool
    menu_level: int
    parent_id: Optional[str] = None
    product_count: int = 0
    active_product_count: int = 0
    created_at: datetime
    updated_at: datetime


class CategoryCreate(CamelModel):
    """Schema for adding a new category from the menu editor."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    slug: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    image: Optional[str] = Field(None, max_length=1024)
    parent_id: Optional[str] = None
    menu_level: int = Field(0, ge=0)
    sort_order: int = 0
    is_active: StrictBool = True

    model_config = ConfigDict(str_strip_whitespace=True)


_NON_NULLABLE_UPDATE_FIELDS = (
    "name",
    "slug",
    "description",
    "is_active",
    "show_in_menu",
    "sort_order",
    "menu_order",
    "menu_level",
)


class CategoryUpdate(CamelModel):
    """Schema for a partial category update.

    Only keys present in the payload are applied; ``parentId: null`` detaches
    the category from its parent.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = Field(None, max_length=1024)
    is_active: Optional[StrictBool] = None
    show_in_menu: Optional[StrictBool] = None
    sort_order: Optional[int] = None
    menu_order: Optional[int] = Field(None, ge=0)
    menu_level: Optional[int] = Field(None, ge=0)
    parent_id: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="after")
    def reject_null_for_required_columns(self) -> "CategoryUpdate":
        """Disallow explicit nulls for columns that cannot be empty."""
        for field_name in _NON_NULLABLE_UPDATE_FIELDS:
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{to_camel(field_name)} cannot be null")
        return self

    def changes(self) -> dict:
        """Return only the attributes explicitly provided by the client."""
        return self.model_dump(exclude_unset=True)


class VisibilityToggle(CamelModel):
    """Schema for showing or hiding a category in the menu."""

    show_in_menu: StrictBool


__all__ = [
    "CamelModel",
    "CategoryCreate",
    "CategoryRead",
    "CategoryUpdate",
    "VisibilityToggle",
]
