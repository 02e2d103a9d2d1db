"""Tests for single-category services."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from backoffice.models.category import Category
from backoffice.models.product import Product
from backoffice.schemas.category import CategoryCreate
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
    slugify,
    update_category,
)
from backoffice.services.product_links import count_products_for_category


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Bath & Body", "bath-body"),
        ("  Personal   Care ", "personal-care"),
        ("Men's Grooming!", "mens-grooming"),
        ("--Already--dashed--", "already-dashed"),
        ("Crème Brûlée", "crme-brle"),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected


def test_create_category_appends_after_siblings(db_session, make_category):
    make_category("Makeup", menu_order=4)
    parent = make_category("Skincare", menu_order=7)
    make_category("Serums", menu_order=2, parent_id=parent.id)

    top_level = create_category(db_session, CategoryCreate(name="Fragrance", description="Perfumes"))
    child = create_category(
        db_session,
        CategoryCreate(name="Masks", description="Face masks", parentId=parent.id, menuLevel=1),
    )
    first_child = create_category(
        db_session,
        CategoryCreate(name="Mists", description="Body mists", parentId=top_level.id),
    )

    assert top_level.menu_order == 8
    assert top_level.slug == "fragrance"
    assert top_level.show_in_menu is True
    assert child.menu_order == 3
    assert child.menu_level == 1
    assert first_child.menu_order == 0


def test_create_category_rejects_duplicates(db_session, make_category):
    make_category("Makeup", slug="makeup")

    with pytest.raises(DuplicateCategoryError) as exc_info:
        create_category(db_session, CategoryCreate(name="makeup", description="dup"))
    assert exc_info.value.field == "name"

    with pytest.raises(DuplicateCategoryError) as exc_info:
        create_category(db_session, CategoryCreate(name="Make Up", slug="makeup", description="dup"))
    assert exc_info.value.field == "slug"


def test_create_category_requires_existing_parent(db_session):
    with pytest.raises(CategoryNotFoundError):
        create_category(db_session, CategoryCreate(name="Orphan", description="x", parentId="missing"))


def test_create_category_rejects_names_without_slug_characters(db_session):
    with pytest.raises(MenuValidationError):
        create_category(db_session, CategoryCreate(name="!!!", description="x"))


def test_update_category_applies_only_given_fields(db_session, make_category):
    category = make_category("Makeup", sort_order=3, menu_order=5)

    updated, changed = update_category(db_session, category.id, {"menu_order": 1, "show_in_menu": False})

    assert changed is True
    assert updated.menu_order == 1
    assert updated.show_in_menu is False
    assert updated.sort_order == 3
    assert updated.name == "Makeup"


def test_update_category_without_changes_writes_nothing(db_session, make_category):
    category = make_category("Makeup")

    updated, changed = update_category(db_session, category.id, {})

    assert changed is False
    assert updated.id == category.id


def test_update_category_missing_raises(db_session):
    with pytest.raises(CategoryNotFoundError):
        update_category(db_session, "missing", {"name": "x"})


def test_update_category_rejects_duplicate_name(db_session, make_category):
    make_category("Makeup")
    other = make_category("Skincare")

    with pytest.raises(DuplicateCategoryError):
        update_category(db_session, other.id, {"name": "MAKEUP"})


def test_update_category_allows_keeping_its_own_name(db_session, make_category):
    category = make_category("Makeup")

    updated, changed = update_category(db_session, category.id, {"name": "Makeup", "description": "New"})

    assert changed is True
    assert updated.description == "New"


def test_update_category_rejects_cycles(db_session, make_category):
    top = make_category("Top")
    middle = make_category("Middle", parent_id=top.id)
    bottom = make_category("Bottom", parent_id=middle.id)

    with pytest.raises(CategoryCycleError):
        update_category(db_session, top.id, {"parent_id": bottom.id})
    with pytest.raises(CategoryCycleError):
        update_category(db_session, top.id, {"parent_id": top.id})

    db_session.expire_all()
    assert db_session.get(Category, top.id).parent_id is None


def test_update_category_rejects_missing_parent(db_session, make_category):
    category = make_category("Makeup")

    with pytest.raises(CategoryNotFoundError):
        update_category(db_session, category.id, {"parent_id": "missing"})


def test_update_category_can_detach_parent(db_session, make_category):
    parent = make_category("Parent")
    child = make_category("Child", parent_id=parent.id)

    updated, _ = update_category(db_session, child.id, {"parent_id": None})

    assert updated.parent_id is None


def test_rename_keeps_legacy_product_links(db_session, make_category, make_product):
    category = make_category("Makeup")
    make_product("Lipstick", category="Makeup")
    make_product("Mascara", category="Makeup")
    make_product("Serum", category="Skincare")

    updated, _ = update_category(db_session, category.id, {"name": "Cosmetics"})

    assert updated.name == "Cosmetics"
    assert count_products_for_category(db_session, updated) == 2
    legacy_names = db_session.execute(select(Product.category).order_by(Product.name)).scalars().all()
    assert legacy_names == ["Cosmetics", "Cosmetics", "Skincare"]


def test_set_menu_visibility(db_session, make_category):
    category = make_category("Makeup")

    hidden = set_menu_visibility(db_session, category.id, False)
    assert hidden.show_in_menu is False

    shown = set_menu_visibility(db_session, category.id, True)
    assert shown.show_in_menu is True


def test_set_menu_visibility_missing_raises(db_session):
    with pytest.raises(CategoryNotFoundError):
        set_menu_visibility(db_session, "missing", True)


def test_delete_guard_blocks_categories_with_name_linked_products(db_session, make_category, make_product):
    category = make_category("Makeup")
    make_product("Lipstick", category="Makeup")

    with pytest.raises(CategoryHasProductsError) as exc_info:
        delete_category(db_session, category.id)

    assert exc_info.value.product_count == 1
    assert "1 products" in str(exc_info.value)
    db_session.expire_all()
    assert db_session.get(Category, category.id) is not None


def test_delete_guard_blocks_categories_with_id_linked_products(db_session, make_category, make_product):
    category = make_category("Makeup")
    make_product("Lipstick", category_id=category.id)

    with pytest.raises(CategoryHasProductsError):
        delete_category(db_session, category.id)


def test_delete_guard_blocks_categories_with_children(db_session, make_category):
    parent = make_category("Parent")
    make_category("Child", parent_id=parent.id)

    with pytest.raises(CategoryHasChildrenError) as exc_info:
        delete_category(db_session, parent.id)

    assert exc_info.value.child_count == 1


def test_delete_category_without_dependants_succeeds(db_session, make_category, make_product):
    category = make_category("Makeup")
    make_product("Serum", category="Skincare")

    deleted = delete_category(db_session, category.id)

    assert deleted == (category.id, "Makeup")
    assert db_session.get(Category, category.id) is None


def test_delete_missing_category_raises(db_session):
    with pytest.raises(CategoryNotFoundError):
        delete_category(db_session, "missing")
