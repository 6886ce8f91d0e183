"""Pytest configuration and fixtures for the RBAC service.

Environment is set before app.main is imported: two SQLite files in a temp
directory (business data and the audit sink), tables created by the app
lifespan (DB_AUTO_MIGRATE), rate limiting off. Each test that uses `client`
or `session_factories` starts from empty databases.
"""

import os
import tempfile
from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

_TEST_DIR = tempfile.mkdtemp(prefix="rbac-tests-")
_DB_PATH = os.path.join(_TEST_DIR, "rbac.db")
_AUDIT_DB_PATH = os.path.join(_TEST_DIR, "audit.db")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["AUDIT_DATABASE_URL"] = f"sqlite+aiosqlite:///{_AUDIT_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DB_AUTO_MIGRATE"] = "true"
os.environ["AUDIT_ENABLED"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_OUTPUT"] = "stdout"

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.core.lifespan import create_lifespan  # noqa: E402
from app.infrastructure.persistence import database  # noqa: E402
from app.main import app  # noqa: E402


def _remove_databases() -> None:
    for path in (_DB_PATH, _AUDIT_DB_PATH):
        if os.path.exists(path):
            os.remove(path)


@pytest.fixture
async def running_app() -> AsyncIterator:
    """The app with its lifespan entered (engines, tables, change-audit recorder)."""
    _remove_databases()
    async with create_lifespan(app):
        yield app


@pytest.fixture
async def client(running_app) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=running_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def session_factories(running_app):
    """(business session factory, audit sink session factory) on fresh databases."""
    return database.ensure_engines()


@pytest.fixture
async def create_user(client: AsyncClient):
    """Factory: create a user via the API and return its JSON."""

    async def _create(username: str = "alice", password: str = "secret123", **extra) -> dict:
        body = {
            "username": username,
            "email": extra.pop("email", f"{username}@example.com"),
            "password": password,
            **extra,
        }
        response = await client.post("/api/v1/users", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
async def create_role(client: AsyncClient):
    """Factory: create a role via the API and return its JSON."""

    async def _create(name: str = "editor", **extra) -> dict:
        body = {"name": name, "display_name": extra.pop("display_name", name.title()), **extra}
        response = await client.post("/api/v1/roles", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
async def create_permission(client: AsyncClient):
    """Factory: create a permission via the API and return its JSON."""

    async def _create(resource: str = "user", action: str = "create", **extra) -> dict:
        body = {
            "name": extra.pop("name", f"{resource}:{action}"),
            "display_name": extra.pop("display_name", f"{action.title()} {resource}"),
            "resource": resource,
            "action": action,
            **extra,
        }
        response = await client.post("/api/v1/permissions", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
async def audit_entries(client: AsyncClient):
    """Factory: audit log entries matching filters, newest first."""

    async def _list(**filters) -> list[dict]:
        params = {"page_size": 100, **filters}
        response = await client.get("/api/v1/audit-logs", params=params)
        assert response.status_code == 200, response.text
        return response.json()["items"]

    return _list
