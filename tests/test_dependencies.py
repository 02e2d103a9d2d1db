import pytest
from fastapi import HTTPException

from backoffice.api.dependencies.auth import get_optional_user, require_active_user, require_menu_editor
from backoffice.core.auth_provider import FixtureAuthProvider, JWTAuthProvider, Principal
from backoffice.core.security import create_access_token
from backoffice.schemas.auth import UserCreate
from backoffice.services import create_user


def test_require_active_user_returns_principal(db_session):
    user = create_user(db_session, UserCreate(email="dep@example.com", password="password123"))
    token = create_access_token(subject=str(user.id))

    principal = require_active_user(token=token, db=db_session, provider=JWTAuthProvider())

    assert principal.id == str(user.id)
    assert principal.role == "staff"


def test_require_active_user_rejects_invalid_token(db_session):
    with pytest.raises(HTTPException) as exc_info:
        require_active_user(token="invalid", db=db_session, provider=JWTAuthProvider())

    assert exc_info.value.status_code == 401


def test_get_optional_user_returns_none_without_credentials(db_session):
    assert get_optional_user(token=None, db=db_session, provider=JWTAuthProvider()) is None


def test_get_optional_user_with_fixture_provider(db_session):
    principal = Principal(id="fixture", email="f@example.com", role="admin")

    assert get_optional_user(token=None, db=db_session, provider=FixtureAuthProvider(principal)) is principal


@pytest.mark.parametrize("role", ["admin", "manager"])
def test_require_menu_editor_accepts_editor_roles(role):
    principal = Principal(id="1", email="e@example.com", role=role)

    assert require_menu_editor(principal) is principal


def test_require_menu_editor_rejects_staff():
    with pytest.raises(HTTPException) as exc_info:
        require_menu_editor(Principal(id="1", email="s@example.com", role="staff"))

    assert exc_info.value.status_code == 403


def test_access_token_carries_role_and_audience():
    from jose import jwt
    from backoffice.core.config import settings
    from backoffice.core.security import TOKEN_AUDIENCE

    token = create_access_token(subject="test-user-id", role="admin")

    payload = jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=TOKEN_AUDIENCE,
    )
    assert payload["sub"] == "test-user-id"
    assert payload["role"] == "admin"
    assert payload["aud"] == "backoffice-menu"
    assert payload["exp"] > payload["iat"]


def test_decode_access_token_rejects_foreign_audience():
    from datetime import datetime, timedelta, timezone

    from jose import JWTError, jwt
    from backoffice.core.config import settings
    from backoffice.core.security import decode_access_token

    foreign = jwt.encode(
        {
            "sub": "test-user-id",
            "aud": "storefront",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        },
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(JWTError):
        decode_access_token(foreign)
