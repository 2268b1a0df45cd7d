"""Pytest fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from roster.infrastructure.persistence.sqlalchemy.database import (
    create_engine_for_url,
    create_tables,
)
from roster.presentation.api.app import API_PREFIX, create_app
from roster.presentation.api.dependencies import get_db_session, get_password_service
from roster_auth import PasswordHashingService
from roster_config.settings import Settings


@pytest.fixture
def api_prefix() -> str:
    return API_PREFIX


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{(tmp_path / 'roster-test.db').as_posix()}"


@pytest.fixture
def api_settings(database_url) -> Settings:
    """Test API settings with debug enabled."""
    return Settings(
        jwt_secret_key=SecretStr("test-jwt-secret-for-testing-only"),
        app_env="testing",
        database_url=database_url,
        api_host="127.0.0.1",
        api_port=8000,
        api_debug=True,
        api_cors_origins="http://localhost:4200",
        api_cookie_secure=False,  # Allow HTTP in tests
        rate_limit_enabled=False,
    )


@pytest.fixture
async def test_db_engine(database_url):
    """A SQLite file per test, opened without pooling by any event loop."""
    engine = create_engine_for_url(database_url, poolclass=NullPool)
    await create_tables(engine)

    yield engine

    await engine.dispose()


def build_client(settings: Settings, engine) -> TestClient:
    app = create_app(settings=settings)

    test_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db_session():
        async with test_session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    # Minimum bcrypt cost keeps the suite fast
    app.dependency_overrides[get_password_service] = lambda: PasswordHashingService(
        rounds=4,
    )
    return TestClient(app)


@pytest.fixture
def make_client(test_db_engine):
    """Build further clients with other settings against the same database."""

    def _make_client(settings: Settings) -> TestClient:
        return build_client(settings, test_db_engine)

    return _make_client


@pytest.fixture
def test_client(api_settings, make_client) -> TestClient:
    """Create a test client bound to the per-test database."""
    return make_client(api_settings)


@pytest.fixture
def admin_data() -> dict:
    return {
        "email": "admin@example.com",
        "password": "AdminPassword123",
        "firstName": "Ada",
        "lastName": "Admin",
    }


@pytest.fixture
def user_data() -> dict:
    return {
        "email": "user@example.com",
        "password": "UserPassword123",
        "firstName": "Uma",
        "lastName": "User",
    }


@pytest.fixture
def admin_headers(test_client, admin_data, api_prefix) -> dict:
    """The first registered account, which is an admin."""
    response = test_client.post(f"{api_prefix}/auth/register", json=admin_data)
    assert response.status_code == 201, response.text
    assert response.json()["user"]["role"] == "Admin"

    token = response.json()["accessToken"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(test_client, admin_headers, user_data, api_prefix) -> dict:
    """A regular account, registered after the admin."""
    response = test_client.post(f"{api_prefix}/auth/register", json=user_data)
    assert response.status_code == 201, response.text
    assert response.json()["user"]["role"] == "User"

    token = response.json()["accessToken"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_role(test_client, admin_headers, api_prefix):
    """Create a role as admin and return its JSON."""

    def _make_role(name: str, description: str | None = None) -> dict:
        response = test_client.post(
            f"{api_prefix}/roles",
            json={"name": name, "description": description},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make_role
