"""Pytest configuration and fixtures for catalog-search.

HTTP tests use app.main:app through ASGITransport (lifespan is not run)
with fakes from tests.fakes placed on app.state per test.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

import app.infrastructure.persistence.database as database
from app.application.use_cases.discovery import DiscoveryService
from app.application.use_cases.sync import SyncService
from app.main import app as fastapi_app
from app.shared.utils.retry import RetryPolicy
from tests.fakes import FakeCache, FakeContentReader, FakeQueue, FakeSearchIndex, no_sleep

_APP_STATE_NAMES = (
    "cache",
    "search_index",
    "index_queue",
    "discovery_service",
    "sync_service",
    "sqs_worker",
    "change_listener",
)


@pytest.fixture
def search_index() -> FakeSearchIndex:
    return FakeSearchIndex()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def reader() -> FakeContentReader:
    return FakeContentReader()


@pytest.fixture
def queue() -> FakeQueue:
    return FakeQueue()


@pytest.fixture
def sync_service(reader: FakeContentReader, search_index: FakeSearchIndex, cache: FakeCache) -> SyncService:
    """Consumer with three attempts and no real backoff."""
    return SyncService(
        reader,
        search_index,
        cache,
        retry_policy=RetryPolicy(max_attempts=3, base_delay=0.01),
        sleep=no_sleep,
    )


@pytest.fixture
def discovery_service(search_index: FakeSearchIndex, cache: FakeCache) -> DiscoveryService:
    return DiscoveryService(search_index, cache)


@pytest.fixture
async def app_state(
    search_index: FakeSearchIndex,
    cache: FakeCache,
    queue: FakeQueue,
    sync_service: SyncService,
    discovery_service: DiscoveryService,
):
    """Wire fakes onto app.state; restore to unset after the test."""
    state = fastapi_app.state
    state.cache = cache
    state.search_index = search_index
    state.index_queue = queue
    state.sync_service = sync_service
    state.discovery_service = discovery_service
    state.sqs_worker = None
    state.change_listener = None
    yield state
    for name in _APP_STATE_NAMES:
        setattr(state, name, None)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Database session for repository tests. Rolls back after test.

    Skips when DATABASE_URL is not configured. Mark such tests with
    @pytest.mark.requires_db; run without DB via: pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_URL, then run: alembic upgrade head")
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
