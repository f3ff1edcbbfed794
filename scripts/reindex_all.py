"""Rebuild the search index from the record store.

Usage:
    uv run python -m scripts.reindex_all [batch_size]
Creates the index if missing, re-indexes every show then every episode,
and wipes cached search results once at the end.
Requires DATABASE_URL and OPENSEARCH_ENDPOINT.
"""

import asyncio
import sys

import app.infrastructure.persistence.database as database
from app.application.use_cases.sync import SyncService
from app.core.config import get_settings
from app.infrastructure.cache.redis_cache import CacheService
from app.infrastructure.persistence.repositories.content_repo import SqlContentReader
from app.infrastructure.search.opensearch_client import SearchIndexClient
from app.shared.telemetry.logging import setup_logging
from app.shared.utils.retry import RetryPolicy


async def main() -> None:
    """Walk every show and episode id through the consumer."""
    setup_logging()
    settings = get_settings()
    if not settings.opensearch_endpoint:
        print("Set OPENSEARCH_ENDPOINT to reindex", file=sys.stderr)
        sys.exit(1)
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)
    batch_size = int(sys.argv[1]) if len(sys.argv) > 1 else 500

    search_index = SearchIndexClient.from_settings(settings)
    cache = None
    if settings.redis_enabled:
        cache = CacheService(settings=settings)
        await cache.connect()
    try:
        await search_index.ensure_index()
        sync = SyncService(
            SqlContentReader(database.AsyncSessionLocal),
            search_index,
            cache,
            retry_policy=RetryPolicy(settings.retry_max_attempts, settings.retry_base_delay_seconds),
            invalidate_featured=True,
        )
        result = await sync.reindex_all(batch_size=batch_size)
    finally:
        if cache is not None:
            await cache.disconnect()
        await search_index.close()
        await database.dispose_engine()

    print(f"Indexed {result.succeeded}, skipped {result.skipped}, failed {result.failed}")
    if result.failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
