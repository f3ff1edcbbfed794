"""Application lifespan: startup and shutdown.

Composition root for the sync pipeline: builds the cache, search index,
record-store reader, queue, consumer and discovery service, stores them on
app.state, and starts the optional background consumers (SQS long-poll
worker, Postgres change listener). No business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.application.use_cases.discovery import DiscoveryService
from app.application.use_cases.sync import SyncService
from app.core.config import Settings, get_settings
from app.infrastructure.exceptions import SearchIndexError
from app.shared.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


def _setup_telemetry(app: FastAPI, settings: Settings) -> None:
    from app.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

    telemetry = TelemetryConfig(settings)
    if telemetry.setup() is not None:
        telemetry.instrument_fastapi(app)
        telemetry.instrument_redis()
        telemetry.instrument_logging()
    set_telemetry(telemetry)


async def _start_cache(settings: Settings):
    if not settings.redis_enabled:
        logger.info("Redis disabled; discovery reads go straight to the index")
        return None
    from app.infrastructure.cache.redis_cache import CacheService

    cache = CacheService(settings=settings)
    await cache.connect()
    return cache


async def _start_search_index(settings: Settings):
    if not settings.opensearch_endpoint:
        logger.warning("OPENSEARCH_ENDPOINT not set; discovery and indexing are disabled")
        return None
    from app.infrastructure.search.opensearch_client import SearchIndexClient

    search_index = SearchIndexClient.from_settings(settings)
    try:
        await search_index.ensure_index()
    except SearchIndexError as e:
        logger.warning("Could not verify search index %s at startup: %s", settings.opensearch_index_name, e)
    return search_index


def _content_reader(settings: Settings):
    if not settings.database_url:
        logger.warning("DATABASE_URL not set; indexing consumer is disabled")
        return None
    from app.infrastructure.persistence import database
    from app.infrastructure.persistence.repositories.content_repo import SqlContentReader
    from app.shared.telemetry.telemetry import get_telemetry

    factory = database.get_session_factory()
    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.instrument_sqlalchemy(database.engine)
    return SqlContentReader(factory)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry, cache, search index, queue, consumer,
    background workers. Shutdown runs in reverse.
    """
    settings = get_settings()

    # ---- Startup ----
    _setup_telemetry(app, settings)

    retry_policy = RetryPolicy(settings.retry_max_attempts, settings.retry_base_delay_seconds)
    cache = await _start_cache(settings)
    search_index = await _start_search_index(settings)
    reader = _content_reader(settings)

    from app.infrastructure.messaging.sqs_queue import SqsIndexQueue, create_sqs_client

    sqs_client = create_sqs_client(settings)
    app.state.retry_policy = retry_policy
    app.state.cache = cache
    app.state.search_index = search_index
    app.state.index_queue = SqsIndexQueue(sqs_client, settings.sqs_queue_url, retry_policy)
    app.state.discovery_service = None
    app.state.sync_service = None
    app.state.sqs_worker = None
    app.state.change_listener = None

    if search_index is not None:
        app.state.discovery_service = DiscoveryService(
            search_index,
            cache,
            search_ttl=settings.cache_ttl_search,
            featured_ttl=settings.cache_ttl_featured,
            featured_default_limit=settings.featured_default_limit,
        )
    if search_index is not None and reader is not None:
        app.state.sync_service = SyncService(
            reader,
            search_index,
            cache,
            retry_policy=retry_policy,
            invalidate_featured=settings.cache_invalidate_featured,
        )

    sync_service = app.state.sync_service
    if settings.sqs_worker_enabled:
        if sync_service is None:
            logger.warning("SQS worker enabled but the indexing consumer is not configured")
        else:
            from app.infrastructure.messaging.sqs_queue import SqsIndexWorker

            worker = SqsIndexWorker.from_settings(settings, sync_service, client=sqs_client)
            worker.start()
            app.state.sqs_worker = worker

    if settings.change_listener_enabled:
        if sync_service is None:
            logger.warning("Change listener enabled but the indexing consumer is not configured")
        else:
            from app.infrastructure.messaging.pg_listener import ChangeListener

            listener = ChangeListener(
                settings.asyncpg_dsn,
                sync_service,
                reconnect_delay=settings.change_listener_reconnect_seconds,
            )
            listener.start()
            app.state.change_listener = listener

    yield

    # ---- Shutdown ----
    if app.state.change_listener is not None:
        await app.state.change_listener.stop()
    if app.state.sqs_worker is not None:
        await app.state.sqs_worker.stop()
    if app.state.search_index is not None:
        await app.state.search_index.close()
    if app.state.cache is not None:
        await app.state.cache.disconnect()

    from app.shared.telemetry.telemetry import get_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()

    from app.infrastructure.persistence.database import dispose_engine

    await dispose_engine()
