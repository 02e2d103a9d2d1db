"""Shared pytest fixtures for back office tests."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["AUTH_PROVIDER"] = "jwt"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import main  # noqa: E402
from backoffice.core.security import create_access_token  # noqa: E402
from backoffice.db.base import Base  # noqa: E402
from backoffice.db.session import get_db  # noqa: E402
from backoffice.models.category import Category  # noqa: E402
from backoffice.models.product import Product  # noqa: E402
from backoffice.schemas.auth import UserCreate  # noqa: E402
from backoffice.services.users import create_user  # noqa: E402


test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    bind=test_engine,
    autocommit=False,
    autoflush=False,
    future=True,
)

Base.metadata.create_all(bind=test_engine)


class SyncASGITestClient:
    """Synchronous wrapper around httpx.AsyncClient for ASGI apps."""

    def __init__(self, app) -> None:
        transport = httpx.ASGITransport(app=app)
        self._client = httpx.AsyncClient(transport=transport, base_url="http://testserver")

    def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        return asyncio.run(self._client.request(method, url, **kwargs))

    def get(self, url: str, **kwargs) -> httpx.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> httpx.Response:
        return self.request("POST", url, **kwargs)

    def delete(self, url: str, **kwargs) -> httpx.Response:
        return self.request("DELETE", url, **kwargs)

    def put(self, url: str, **kwargs) -> httpx.Response:
        return self.request("PUT", url, **kwargs)

    def __enter__(self) -> "SyncASGITestClient":
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        asyncio.run(self._client.aclose())


@pytest.fixture(autouse=True)
def verify_connection_tracker(monkeypatch: pytest.MonkeyPatch) -> Generator[dict[str, int], None, None]:
    """Track how many times the startup connection verifier is called."""

    tracker = {"calls": 0, "migrations": 0}

    def fake_verify_connection() -> None:
        tracker["calls"] += 1

    def fake_run_migrations() -> None:
        tracker["migrations"] += 1

    monkeypatch.setattr(main, "verify_connection", fake_verify_connection)
    monkeypatch.setattr(main, "run_migrations", fake_run_migrations)
    yield tracker


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    """Provide a clean database session for each test."""

    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def override_get_db(db_session: Session) -> Generator[None, None, None]:
    """Override the FastAPI dependency to use the test session."""

    def _get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            pass

    main.app.dependency_overrides[get_db] = _get_db
    yield
    main.app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def client() -> Generator[SyncASGITestClient, None, None]:
    """Synchronous test client backed by httpx's ASGI transport."""

    with SyncASGITestClient(main.app) as test_client:
        yield test_client


@pytest.fixture()
def make_category(db_session: Session) -> Callable[..., Category]:
    """Insert a category row with sensible defaults."""

    def _make(name: str, **overrides: Any) -> Category:
        values: dict[str, Any] = {
            "name": name,
            "slug": name.lower().replace(" ", "-"),
            "description": f"{name} products",
            "is_active": True,
            "show_in_menu": True,
            "sort_order": 0,
            "menu_order": 0,
            "menu_level": 0,
        }
        values.update(overrides)
        category = Category(**values)
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category

    return _make


@pytest.fixture()
def make_product(db_session: Session) -> Callable[..., Product]:
    """Insert a product linked by category id or legacy category name."""

    def _make(name: str, **overrides: Any) -> Product:
        product = Product(name=name, **overrides)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _make


def _token_for(db_session: Session, email: str, role: str) -> str:
    user = create_user(db_session, UserCreate(email=email, password="secret123", role=role))
    return create_access_token(subject=str(user.id), role=user.role)


@pytest.fixture()
def admin_token(db_session: Session) -> str:
    return _token_for(db_session, "admin@example.com", "admin")


@pytest.fixture()
def manager_token(db_session: Session) -> str:
    return _token_for(db_session, "manager@example.com", "manager")


@pytest.fixture()
def staff_token(db_session: Session) -> str:
    return _token_for(db_session, "staff@example.com", "staff")


@pytest.fixture()
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}
