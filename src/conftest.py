from contextlib import asynccontextmanager
from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient

from src.invitations.dependencies import get_clock, get_invitation_locks, get_table_store
from src.invitations.locks import KeyedLock
from src.invitations.repository.tests.inmemory_store import FrozenClock, create_test_store
from src.main import app

# A Monday afternoon, not on a half hour
NOW = datetime(2026, 5, 4, 14, 7, 12, tzinfo=UTC)


@pytest.fixture
def store():
    """Create a fresh in-memory table store for each test."""
    return create_test_store()


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def locks():
    return KeyedLock()


@pytest.fixture
def client_factory(store, clock, locks):
    """Build a test client with dependency overrides on top of the in-memory defaults."""

    @asynccontextmanager
    async def _client_factory(overrides: dict | None = None):
        app.dependency_overrides[get_table_store] = lambda: store
        app.dependency_overrides[get_clock] = lambda: clock
        app.dependency_overrides[get_invitation_locks] = lambda: locks
        app.dependency_overrides.update(overrides or {})

        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return _client_factory


@pytest.fixture
async def client(client_factory):
    async with client_factory() as ac:
        yield ac
