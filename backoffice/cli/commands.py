"""Maintenance commands for the back office menu."""

from __future__ import annotations

import click
from sqlalchemy import select

from backoffice.client.api import MenuApiClient, MenuApiError
from backoffice.client.editor import MenuEditor
from backoffice.db.session import SessionLocal
from backoffice.models.category import Category
from backoffice.schemas.auth import UserCreate
from backoffice.services.menu import sync_categories
from backoffice.services.product_links import backfill_category_ids
from backoffice.services.users import create_user, get_user_by_email, set_user_role


SAMPLE_CATEGORIES = [
    {
        "name": "Makeup",
        "slug": "makeup",
        "description": "All makeup products including lipsticks, foundation, and more",
        "menu_order": 1,
        "show_in_menu": True,
    },
    {
        "name": "Skincare",
        "slug": "skincare",
        "description": "Complete skincare range for all skin types",
        "menu_order": 2,
        "show_in_menu": True,
    },
    {
        "name": "Haircare",
        "slug": "haircare",
        "description": "Hair products for healthy and beautiful hair",
        "menu_order": 3,
        "show_in_menu": True,
    },
    {
        "name": "Fragrance",
        "slug": "fragrance",
        "description": "Premium fragrances and perfumes",
        "menu_order": 4,
        "show_in_menu": True,
    },
    {
        "name": "Personal Care",
        "slug": "personal-care",
        "description": "Personal care essentials",
        "menu_order": 5,
        "show_in_menu": True,
    },
    {
        "name": "Men",
        "slug": "men",
        "description": "Grooming products for men",
        "menu_order": 6,
        "show_in_menu": True,
    },
    {
        "name": "Bath & Body",
        "slug": "bath-body",
        "description": "Body care products and bath essentials",
        "menu_order": 7,
        "show_in_menu": False,
    },
]


def build_api_client(api_url: str, token: str | None) -> MenuApiClient:
    return MenuApiClient(api_url, token=token)


@click.group()
def cli():
    """Back office menu maintenance commands."""
    pass


@cli.command("create-admin")
@click.option("--email", prompt="User email", help="Email of the operator to create or promote")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Password for a new operator")
@click.option("--full-name", default=None, help="Display name for a new operator")
@click.option(
    "--role",
    type=click.Choice(["admin", "manager"]),
    default="admin",
    show_default=True,
    help="Role to grant",
)
def create_admin(email: str, password: str, full_name: str | None, role: str):
    """Create an operator with menu rights, or promote an existing one."""
    db = SessionLocal()
    try:
        user = get_user_by_email(db, email)
        if user is not None:
            set_user_role(db, user, role)
            click.echo(f"Granted {role} role to existing user: {user.email}")
            return

        try:
            user_in = UserCreate(email=email, password=password, full_name=full_name, role=role)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        user = create_user(db, user_in)
        click.echo(f"Created {role} user: {user.email}")
    finally:
        db.close()


@cli.command("sync-categories")
@click.option(
    "--level-policy",
    type=click.Choice(["flatten", "preserve"]),
    default=None,
    help="Override MENU_SYNC_LEVEL_POLICY for this run",
)
def sync_categories_command(level_policy: str | None):
    """Reset menu order and visibility from the active categories."""
    db = SessionLocal()
    try:
        outcome = sync_categories(db, level_policy)
    finally:
        db.close()
    click.echo(
        f"Synced {outcome.total_categories} active categories "
        f"(level policy: {outcome.level_policy}) at {outcome.synced_at.isoformat()}"
    )


@cli.command("backfill-product-links")
def backfill_product_links():
    """Fill products.category_id from the legacy category name."""
    db = SessionLocal()
    try:
        updated = backfill_category_ids(db)
    finally:
        db.close()
    click.echo(f"Linked {updated} product(s) to their category by id")


@cli.command("seed-menu")
def seed_menu():
    """Insert the sample menu categories that are not present yet."""
    db = SessionLocal()
    created = 0
    try:
        existing = set(db.execute(select(Category.name)).scalars())
        for sort_order, data in enumerate(SAMPLE_CATEGORIES):
            if data["name"] in existing:
                click.echo(f"  - Skipped existing category: {data['name']}")
                continue
            db.add(Category(sort_order=sort_order, menu_level=0, is_active=True, **data))
            created += 1
            click.echo(f"  + Added category: {data['name']}")
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    click.echo(f"Seeded {created} categories")


@cli.command("show-menu")
@click.option("--api-url", envvar="BACKOFFICE_API_URL", default="http://localhost:8000", show_default=True)
@click.option("--token", envvar="BACKOFFICE_API_TOKEN", default=None, help="Bearer token; required with --all")
@click.option("--all", "show_all", is_flag=True, help="Include hidden and inactive categories")
def show_menu(api_url: str, token: str | None, show_all: bool):
    """Print the menu tree as served by a running API."""
    with build_api_client(api_url, token) as api:
        editor = MenuEditor(api, show_all=show_all)
        try:
            editor.refresh()
        except MenuApiError as exc:
            raise click.ClickException(f"Could not load menu: {exc.message}") from exc

        rows = editor.rows()
        if not rows:
            click.echo("No categories yet.")
            return
        for row in rows:
            flags = []
            if not row.item.get("showInMenu", True):
                flags.append("hidden")
            if not row.item.get("isActive", True):
                flags.append("inactive")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            click.echo(f"{'  ' * row.indent}{row.item['menuOrder']:>3}  {row.item['name']}{suffix}")


if __name__ == "__main__":
    cli()
