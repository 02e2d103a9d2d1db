"""Tests for the maintenance CLI."""

from __future__ import annotations

import httpx
import pytest
from click.testing import CliRunner
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from backoffice.cli import cli
from backoffice.cli import commands
from backoffice.client.api import MenuApiClient
from backoffice.models.category import Category
from backoffice.models.product import Product
from backoffice.services.users import get_user_by_email


@pytest.fixture()
def runner(db_session, monkeypatch):
    factory = sessionmaker(bind=db_session.get_bind(), autocommit=False, autoflush=False, future=True)
    monkeypatch.setattr(commands, "SessionLocal", factory)
    return CliRunner()


def test_seed_menu_is_idempotent(runner, db_session):
    first = runner.invoke(cli, ["seed-menu"])

    assert first.exit_code == 0, first.output
    assert "Seeded 7 categories" in first.output
    categories = db_session.execute(select(Category).order_by(Category.menu_order)).scalars().all()
    assert [category.name for category in categories][:2] == ["Makeup", "Skincare"]
    bath = next(category for category in categories if category.slug == "bath-body")
    assert bath.show_in_menu is False

    second = runner.invoke(cli, ["seed-menu"])

    assert second.exit_code == 0, second.output
    assert "Seeded 0 categories" in second.output
    assert "Skipped existing category: Makeup" in second.output


def test_sync_categories_command(runner, db_session, make_category):
    category = make_category("Makeup", sort_order=4, menu_order=9, menu_level=2, show_in_menu=False)

    result = runner.invoke(cli, ["sync-categories", "--level-policy", "preserve"])

    assert result.exit_code == 0, result.output
    assert "Synced 1 active categories (level policy: preserve)" in result.output
    db_session.expire_all()
    refreshed = db_session.get(Category, category.id)
    assert (refreshed.menu_order, refreshed.menu_level, refreshed.show_in_menu) == (4, 2, True)


def test_sync_categories_rejects_unknown_policy(runner):
    result = runner.invoke(cli, ["sync-categories", "--level-policy", "nested"])

    assert result.exit_code != 0
    assert "nested" in result.output


def test_backfill_product_links_command(runner, db_session, make_category, make_product):
    category = make_category("Makeup")
    product = make_product("Lipstick", category="Makeup")

    result = runner.invoke(cli, ["backfill-product-links"])

    assert result.exit_code == 0, result.output
    assert "Linked 1 product(s)" in result.output
    db_session.expire_all()
    assert db_session.get(Product, product.id).category_id == category.id


def test_create_admin_creates_new_operator(runner, db_session):
    result = runner.invoke(
        cli,
        ["create-admin", "--email", "Boss@Example.com", "--full-name", "Boss", "--role", "manager"],
        input="supersecret\nsupersecret\n",
    )

    assert result.exit_code == 0, result.output
    assert "Created manager user: boss@example.com" in result.output
    user = get_user_by_email(db_session, "boss@example.com")
    assert user is not None
    assert user.role == "manager"


def test_create_admin_promotes_existing_operator(runner, db_session, staff_token):
    result = runner.invoke(cli, ["create-admin", "--email", "staff@example.com", "--password", "ignored1"])

    assert result.exit_code == 0, result.output
    assert "Granted admin role to existing user: staff@example.com" in result.output
    db_session.expire_all()
    assert get_user_by_email(db_session, "staff@example.com").role == "admin"


def test_create_admin_reports_invalid_input(runner):
    result = runner.invoke(cli, ["create-admin", "--email", "not-an-email", "--password", "supersecret"])

    assert result.exit_code == 1
    assert "Error:" in result.output


def _install_api(monkeypatch, handler):
    def build(api_url, token):
        return MenuApiClient(api_url, token=token, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(commands, "build_api_client", build)


def test_show_menu_prints_indented_rows(runner, monkeypatch):
    items = [
        {"id": "a", "name": "Skincare", "menuOrder": 0, "menuLevel": 0, "parentId": None, "showInMenu": True},
        {"id": "b", "name": "Serums", "menuOrder": 1, "menuLevel": 1, "parentId": "a", "showInMenu": False},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params.get("showAll") == "true"
        assert request.headers["Authorization"] == "Bearer t0ken"
        return httpx.Response(200, json={"success": True, "data": items})

    _install_api(monkeypatch, handler)

    result = runner.invoke(cli, ["show-menu", "--all", "--token", "t0ken"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines == ["  0  Skincare", "    1  Serums [hidden]"]


def test_show_menu_when_empty(runner, monkeypatch):
    _install_api(monkeypatch, lambda request: httpx.Response(200, json={"success": True, "data": []}))

    result = runner.invoke(cli, ["show-menu"])

    assert result.exit_code == 0
    assert "No categories yet." in result.output


def test_show_menu_reports_api_errors(runner, monkeypatch):
    _install_api(
        monkeypatch,
        lambda request: httpx.Response(401, json={"success": False, "message": "Not authenticated."}),
    )

    result = runner.invoke(cli, ["show-menu", "--all"])

    assert result.exit_code == 1
    assert "Could not load menu: Not authenticated." in result.output
