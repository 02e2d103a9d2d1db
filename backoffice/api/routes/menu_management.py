"""Menu management API routes."""

from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backoffice.api.dependencies import get_db, get_optional_user, require_active_user, require_menu_editor
from backoffice.core.auth_provider import Principal
from backoffice.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate, VisibilityToggle
from backoffice.schemas.menu import (
    CategoryResponse,
    DeletedCategory,
    DeleteResponse,
    MenuAuditLogRead,
    MenuAuditLogResponse,
    MenuItemsResponse,
    MenuMeta,
    MenuStatusResponse,
    MenuTreeResponse,
    MessageResponse,
    ReorderRequest,
    ReorderResponse,
    ReorderResult,
    SyncRequest,
    SyncResponse,
    SyncResult,
    VisibilityResponse,
    VisibilityResult,
)
from backoffice.services.categories import (
    CategoryCycleError,
    CategoryHasChildrenError,
    CategoryHasProductsError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    MenuValidationError,
    create_category,
    delete_category,
    set_menu_visibility,
    update_category,
)
from backoffice.services.menu import (
    build_menu_tree,
    count_tree_nodes,
    list_menu_items,
    menu_status,
    reorder_menu,
    sync_categories,
)
from backoffice.services.menu_audit import list_menu_actions, record_menu_action
from backoffice.services.product_links import count_products_for_category

logger = logging.getLogger(__name__)

router = APIRouter(tags=["menu-management"])


def _require_principal_for_show_all(show_all: bool, principal: Optional[Principal]) -> None:
    if show_all and principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication is required to list hidden menu items.",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, CategoryNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, DuplicateCategoryError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


_MENU_ERRORS = (
    CategoryNotFoundError,
    DuplicateCategoryError,
    CategoryCycleError,
    CategoryHasProductsError,
    CategoryHasChildrenError,
    MenuValidationError,
)


@router.get("/menu-items", response_model=MenuItemsResponse)
def get_menu_items(
    show_all: bool = Query(False, alias="showAll"),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_user),
) -> MenuItemsResponse:
    """List menu categories in display order.

    Hidden and inactive categories are only included with ``showAll=true``,
    which requires an authenticated caller.
    """

    _require_principal_for_show_all(show_all, principal)
    items = list_menu_items(db, show_all=show_all)
    return MenuItemsResponse(data=items, meta=MenuMeta(total=len(items), showing_all=show_all))


@router.get("/menu-tree", response_model=MenuTreeResponse)
def get_menu_tree(
    show_all: bool = Query(False, alias="showAll"),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_user),
) -> MenuTreeResponse:
    """Return the menu nested by parent category."""

    _require_principal_for_show_all(show_all, principal)
    tree = build_menu_tree(db, show_all=show_all)
    return MenuTreeResponse(data=tree, meta=MenuMeta(total=count_tree_nodes(tree), showing_all=show_all))


@router.get("/status", response_model=MenuStatusResponse)
def get_menu_status(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_active_user),
) -> MenuStatusResponse:
    """Explain which categories the storefront menu will display."""

    summary, rows = menu_status(db)
    return MenuStatusResponse(summary=summary, data=rows)


@router.put("/reorder", response_model=ReorderResponse)
def reorder_menu_items(
    payload: ReorderRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_menu_editor),
) -> ReorderResponse:
    """Persist a new menu order in a single transaction."""

    try:
        updated = reorder_menu(db, payload.items)
    except _MENU_ERRORS as exc:
        raise _to_http_error(exc) from exc

    record_menu_action(db, principal.id, "reorder", details=f"{updated} item(s) reordered")
    return ReorderResponse(message="Menu order updated successfully", data=ReorderResult(updated=updated))


@router.post("/sync-categories", response_model=SyncResponse)
def sync_menu_with_categories(
    payload: Optional[SyncRequest] = Body(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_menu_editor),
) -> SyncResponse:
    """Rebuild the menu from the active categories' sort order."""

    level_policy = payload.level_policy if payload is not None else None
    try:
        outcome = sync_categories(db, level_policy)
    except MenuValidationError as exc:
        raise _to_http_error(exc) from exc

    record_menu_action(
        db,
        principal.id,
        "sync",
        details=f"{outcome.total_categories} categories synced ({outcome.level_policy})",
    )
    return SyncResponse(
        message=f"Menu synchronised with {outcome.total_categories} active categories",
        data=SyncResult(
            total_categories=outcome.total_categories,
            synced_at=outcome.synced_at,
            level_policy=outcome.level_policy,
        ),
    )


@router.put("/update-item/{category_id}", response_model=Union[CategoryResponse, MessageResponse])
def update_menu_item(
    category_id: str,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_menu_editor),
) -> Union[CategoryResponse, MessageResponse]:
    """Apply a partial update to one category."""

    changes = payload.changes()
    try:
        category, changed = update_category(db, category_id, changes)
    except _MENU_ERRORS as exc:
        raise _to_http_error(exc) from exc

    if not changed:
        return MessageResponse(message="No changes to update")

    record_menu_action(db, principal.id, "update", category.id, details=", ".join(sorted(changes)))
    item = CategoryRead.model_validate(category).model_copy(
        update={
            "product_count": count_products_for_category(db, category),
            "active_product_count": count_products_for_category(db, category, active_only=True),
        }
    )
    return CategoryResponse(message="Menu item updated successfully", data=item)


@router.delete("/delete-item/{category_id}", response_model=DeleteResponse)
def delete_menu_item(
    category_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_menu_editor),
) -> DeleteResponse:
    """Delete a category that nothing depends on."""

    try:
        deleted_id, deleted_name = delete_category(db, category_id)
    except _MENU_ERRORS as exc:
        raise _to_http_error(exc) from exc

    record_menu_action(db, principal.id, "delete", deleted_id, details=deleted_name)
    return DeleteResponse(
        message="Menu item deleted successfully",
        data=DeletedCategory(id=deleted_id, name=deleted_name),
    )


@router.put("/toggle-visibility/{category_id}", response_model=VisibilityResponse)
def toggle_menu_visibility(
    category_id: str,
    payload: VisibilityToggle,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_menu_editor),
) -> VisibilityResponse:
    """Show or hide a category in the menu."""

    try:
        category = set_menu_visibility(db, category_id, payload.show_in_menu)
    except CategoryNotFoundError as exc:
        raise _to_http_error(exc) from exc

    record_menu_action(
        db,
        principal.id,
        "show" if category.show_in_menu else "hide",
        category.id,
    )
    verb = "shown in" if category.show_in_menu else "hidden from"
    return VisibilityResponse(
        message=f"Category {verb} menu",
        data=VisibilityResult(
            id=category.id,
            name=category.name,
            show_in_menu=category.show_in_menu,
            updated_at=category.updated_at,
        ),
    )


@router.post("/add-item", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def add_menu_item(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_menu_editor),
) -> CategoryResponse:
    """Create a category at the end of its siblings in the menu."""

    try:
        category = create_category(db, payload)
    except _MENU_ERRORS as exc:
        raise _to_http_error(exc) from exc

    record_menu_action(db, principal.id, "create", category.id, details=category.name)
    return CategoryResponse(
        message="Menu item created successfully",
        data=CategoryRead.model_validate(category),
    )


@router.get("/audit-log", response_model=MenuAuditLogResponse)
def get_menu_audit_log(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_menu_editor),
) -> MenuAuditLogResponse:
    """Return the most recent menu changes, newest first."""

    entries = list_menu_actions(db, limit=limit)
    return MenuAuditLogResponse(data=[MenuAuditLogRead.model_validate(entry) for entry in entries])


__all__ = ["router"]
