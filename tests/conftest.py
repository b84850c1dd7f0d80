"""Shared fixtures: settings, session codec, mock data access and an app client."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from notsoai.core.auth_context import SESSION_COOKIE_NAME
from notsoai.core.config import Settings
from notsoai.core.security import SessionCodec
from notsoai.core.session import Role, Session
from notsoai.db.mock_data import MockDataAccess
from notsoai.main import create_app

TEST_SECRET = "test-secret-0123456789-abcdefghijklmnop"


def make_session(
    role: Role = Role.OWNER,
    client_id: str = "c_123",
    client_slug: str = "acme-inc",
    user_id: str = "u_1",
) -> Session:
    return Session(client_id=client_id, client_slug=client_slug, user_id=user_id, role=role)


@pytest.fixture(name="make_session")
def make_session_fixture():
    return make_session


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENV="test",
        SESSION_SECRET=TEST_SECRET,
        USE_MOCK_DATA=True,
        ENABLE_DEBUG_LOGGING=False,
    )


@pytest.fixture()
def codec() -> SessionCodec:
    return SessionCodec(TEST_SECRET)


@pytest.fixture()
def data_access() -> MockDataAccess:
    return MockDataAccess()


@pytest.fixture()
def app(settings, data_access):
    application = create_app(settings=settings, data_access=data_access)

    # stand-ins for dashboard pages behind the edge router
    @application.get("/app/{client_id}/home")
    def app_home(client_id: str):
        return {"page": "home", "clientId": client_id}

    @application.get("/profile")
    def profile():
        return {"page": "profile"}

    @application.get("/login")
    def login_page():
        return {"page": "login"}

    return application


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def login_as(client, codec):
    """Put a signed session cookie for the given role on the test client."""

    def _login(role: Role = Role.OWNER, **kwargs) -> Session:
        session = make_session(role=role, **kwargs)
        client.cookies.set(SESSION_COOKIE_NAME, codec.encode(session))
        return session

    return _login
