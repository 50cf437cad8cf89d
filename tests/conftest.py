"""
TodoMVC — Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own on-disk SQLite database (aiosqlite driver) with
       the schema created from the ORM metadata, an app bound to it, and an
       httpx client that talks to the app in-process through ASGITransport.

Fixture Hierarchy (all function-scoped):
    database ─┬─ db_session
              └─ app ── test_client ── api
    mock_db_session: AsyncMock session for failure paths (no DB)
    sample_entries:  three entries, the middle one completed
"""

import os

# Before any todomvc import: the settings singleton reads these at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from todomvc.client.api import TodoApi
from todomvc.database import Database
from todomvc.main import create_app
from todomvc.schemas.task import Entry


@pytest_asyncio.fixture
async def database(tmp_path):
    """A fresh SQLite-backed Database handle with the task table created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'todomvc.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """A committing session on the test database."""
    async with database.session() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value = mock_result
        await task_service.get_by_id(mock_db_session, task_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def app(database):
    return create_app(database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly to the FastAPI app.

    Usage:
        response = await test_client.get("/tasks")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def api(test_client):
    """TodoApi sharing the in-process client."""
    return TodoApi(client=test_client)


@pytest.fixture
def sample_entries():
    """[A (active), B (completed), C (active)]"""
    return [
        Entry.new("A"),
        Entry.new("B").model_copy(update={"completed": True}),
        Entry.new("C"),
    ]
