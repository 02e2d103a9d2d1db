"""Tests for identity providers and their selection."""

from __future__ import annotations

from datetime import timedelta

import pytest

from backoffice.core.auth_provider import (
    AuthenticationError,
    FixtureAuthProvider,
    JWTAuthProvider,
    Principal,
    build_auth_provider,
)
from backoffice.core.config import Settings
from backoffice.core.security import create_access_token
from backoffice.schemas.auth import UserCreate
from backoffice.services.users import create_user


def test_build_auth_provider_defaults_to_jwt(monkeypatch):
    monkeypatch.delenv("AUTH_PROVIDER", raising=False)

    provider = build_auth_provider(Settings(_env_file=None))

    assert isinstance(provider, JWTAuthProvider)


def test_build_auth_provider_uses_fixture_only_when_selected(monkeypatch):
    monkeypatch.setenv("AUTH_PROVIDER", "fixture")
    monkeypatch.setenv("FIXTURE_USER_ID", "dev-1")
    monkeypatch.setenv("FIXTURE_USER_EMAIL", "dev@example.com")
    monkeypatch.setenv("FIXTURE_USER_ROLE", "manager")

    provider = build_auth_provider(Settings(_env_file=None))

    assert isinstance(provider, FixtureAuthProvider)
    assert provider.principal == Principal(id="dev-1", email="dev@example.com", role="manager")


def test_build_auth_provider_rejects_unknown_names():
    config = Settings.model_construct(auth_provider="ldap")

    with pytest.raises(ValueError):
        build_auth_provider(config)


def test_fixture_provider_ignores_credentials(db_session):
    principal = Principal(id="fixture", email="f@example.com", role="admin")
    provider = FixtureAuthProvider(principal)

    assert provider.resolve(None, db_session) is principal
    assert provider.resolve("garbage", db_session) is principal


def test_jwt_provider_resolves_active_user(db_session):
    user = create_user(db_session, UserCreate(email="ops@example.com", password="secret123", role="manager"))
    token = create_access_token(subject=str(user.id))

    principal = JWTAuthProvider().resolve(token, db_session)

    assert principal == Principal(id=str(user.id), email="ops@example.com", role="manager")
    assert principal.can_edit_menu is True


@pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
def test_jwt_provider_rejects_missing_or_malformed_tokens(db_session, token):
    with pytest.raises(AuthenticationError):
        JWTAuthProvider().resolve(token, db_session)


def test_jwt_provider_rejects_expired_tokens(db_session):
    user = create_user(db_session, UserCreate(email="ops@example.com", password="secret123"))
    token = create_access_token(subject=str(user.id), expires_delta=timedelta(minutes=-1))

    with pytest.raises(AuthenticationError):
        JWTAuthProvider().resolve(token, db_session)


def test_jwt_provider_rejects_unknown_and_inactive_users(db_session):
    unknown = create_access_token(subject="00000000-0000-0000-0000-000000000000")
    with pytest.raises(AuthenticationError):
        JWTAuthProvider().resolve(unknown, db_session)

    user = create_user(db_session, UserCreate(email="gone@example.com", password="secret123"))
    user.is_active = False
    db_session.commit()
    token = create_access_token(subject=str(user.id))

    with pytest.raises(AuthenticationError):
        JWTAuthProvider().resolve(token, db_session)


def test_staff_principal_cannot_edit_menu():
    assert Principal(id="1", email="s@example.com", role="staff").can_edit_menu is False
