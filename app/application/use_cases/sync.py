"""Indexing consumer: keeps the search index and cache in step with the record store.

Each change notification runs through
Received -> Resolved -> Transformed -> Applied -> Invalidated -> Acknowledged.
The record is always re-read at processing time; the notification only says
which key to look at. Repeated or reordered deliveries for the same key
therefore converge on the current record state.

Failures:
- record gone (raced with a delete): acknowledged without touching the index.
- episode without a resolvable show: MissingParentShowError, not retried.
- index write still failing after retries: the error propagates so the
  delivery mechanism (queue visibility timeout, HTTP 5xx) redelivers.
- cache invalidation failing after retries: logged, never fatal.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Literal

from app.application.dtos.content import EpisodeRecord, ShowRecord
from app.application.interfaces.repositories import IContentReader
from app.application.interfaces.services import ICacheService, ISearchIndex
from app.application.services.cache_keys import namespace_pattern
from app.application.services.search_document_builder import build_search_document
from app.core.constants import CACHE_PREFIX_FEATURED, CACHE_PREFIX_SEARCH
from app.domain.entities.change_notification import ChangeNotification
from app.domain.enums import ChangeOperation, EntityType, IndexingState
from app.domain.exceptions import ExternalServiceError, NotificationBatchError, RecordTypeMismatchError
from app.shared.telemetry.tracing import add_span_attributes, traced
from app.shared.utils.retry import RetryPolicy, retry_async

logger = logging.getLogger(__name__)

IndexAction = Literal["upserted", "deleted", "skipped"]


@dataclass(frozen=True)
class IndexingOutcome:
    """Result of one acknowledged notification."""

    notification: ChangeNotification
    state: IndexingState
    action: IndexAction
    cache_invalidated: bool = False


@dataclass
class BatchResult:
    """Outcomes of a delivered batch. Failures keep their original exception."""

    outcomes: list[IndexingOutcome] = field(default_factory=list)
    failures: list[tuple[ChangeNotification, Exception]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes) + len(self.failures)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.action != "skipped")

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.action == "skipped")

    @property
    def failed(self) -> int:
        return len(self.failures)

    def raise_for_failures(self) -> None:
        """Raise NotificationBatchError if any notification failed."""
        if not self.failures:
            return
        errors: list[dict[str, Any]] = [
            {
                "entityType": n.entity_type.value,
                "entityId": n.entity_id,
                "operation": n.operation.value,
                "error": getattr(exc, "error_code", type(exc).__name__),
                "message": str(exc),
            }
            for n, exc in self.failures
        ]
        raise NotificationBatchError(self.failed, self.total, errors)


class SyncService:
    """Idempotent indexing consumer shared by the queue and DB change paths.

    Notifications for the same index key are serialized with a per-key lock;
    different keys may be processed concurrently.
    """

    def __init__(
        self,
        content_reader: IContentReader,
        search_index: ISearchIndex,
        cache: ICacheService | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        invalidate_featured: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.content_reader = content_reader
        self.search_index = search_index
        self.cache = cache
        self.retry_policy = retry_policy or RetryPolicy()
        # featured:* is left to expire by TTL unless explicitly enabled.
        self.invalidate_featured = invalidate_featured
        self._sleep = sleep
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @traced("sync.process")
    async def process(self, notification: ChangeNotification) -> IndexingOutcome:
        """Run one notification through the pipeline.

        Raises:
            MissingParentShowError: Episode whose show cannot be resolved.
            ExternalServiceError: Index write failed after all retries.
        """
        add_span_attributes(
            entity_type=notification.entity_type.value,
            entity_id=notification.entity_id,
            operation=notification.operation.value,
        )
        async with self._key_lock(notification.index_key):
            return await self._run(notification, invalidate=True)

    async def process_batch(
        self,
        notifications: Iterable[ChangeNotification],
        *,
        fail_fast: bool = False,
    ) -> BatchResult:
        """Process a delivered batch.

        Default: notifications are partitioned by index key; partitions run
        concurrently, each partition in delivery order, and a failure does not
        stop its siblings. fail_fast=True processes strictly in order and
        raises the first error.
        """
        items = list(notifications)
        result = BatchResult()
        if fail_fast:
            for notification in items:
                result.outcomes.append(await self.process(notification))
            return result

        partitions: dict[str, list[ChangeNotification]] = {}
        for notification in items:
            partitions.setdefault(notification.index_key, []).append(notification)

        async def run_partition(group: list[ChangeNotification]) -> None:
            for notification in group:
                try:
                    result.outcomes.append(await self.process(notification))
                except Exception as exc:
                    logger.exception(
                        "Notification %s for %s failed",
                        notification.operation.value,
                        notification.index_key,
                    )
                    result.failures.append((notification, exc))

        await asyncio.gather(*(run_partition(g) for g in partitions.values()))
        logger.info(
            "Processed batch: %d total, %d indexed, %d skipped, %d failed",
            result.total,
            result.succeeded,
            result.skipped,
            result.failed,
        )
        return result

    async def reindex_all(self, batch_size: int = 500) -> BatchResult:
        """Rebuild every show and episode document, then invalidate the cache once."""
        result = BatchResult()
        for entity_type in (EntityType.SHOW, EntityType.EPISODE):
            async for entity_id in self.content_reader.iter_ids(entity_type, batch_size):
                notification = ChangeNotification(entity_type, entity_id, ChangeOperation.UPDATED)
                try:
                    async with self._key_lock(notification.index_key):
                        result.outcomes.append(await self._run(notification, invalidate=False))
                except Exception as exc:
                    logger.exception("Reindex failed for %s", notification.index_key)
                    result.failures.append((notification, exc))
        await self.invalidate_cache()
        logger.info(
            "Reindex complete: %d indexed, %d skipped, %d failed",
            result.succeeded,
            result.skipped,
            result.failed,
        )
        return result

    async def invalidate_cache(self) -> bool:
        """Wipe the search result namespace (and featured, if enabled).

        Returns False when the cache is absent or a wipe failed after retries.
        """
        if self.cache is None or not self.cache.is_available():
            logger.debug("Cache not available; skipping invalidation")
            return False
        prefixes = [CACHE_PREFIX_SEARCH]
        if self.invalidate_featured:
            prefixes.append(CACHE_PREFIX_FEATURED)
        ok = True
        for prefix in prefixes:
            pattern = namespace_pattern(prefix)
            try:
                await retry_async(
                    lambda: self.cache.delete_pattern(pattern, strict=True),
                    self.retry_policy,
                    retry_on=(ExternalServiceError,),
                    operation_name=f"cache invalidate {pattern}",
                    sleep=self._sleep,
                )
            except ExternalServiceError as e:
                logger.warning("Cache invalidation of %s failed; entries expire by TTL: %s", pattern, e)
                ok = False
        return ok

    async def _run(self, notification: ChangeNotification, *, invalidate: bool) -> IndexingOutcome:
        key = notification.index_key
        logger.debug("%s %s: %s", IndexingState.RECEIVED.value, key, notification.operation.value)

        if notification.is_delete:
            action: IndexAction = "deleted"

            def apply() -> Awaitable[None]:
                return self.search_index.delete(key)
        else:
            record = await self.content_reader.fetch(notification.entity_type, notification.entity_id)
            if record is None:
                logger.info("%s no longer exists; nothing to index", key)
                return IndexingOutcome(notification, IndexingState.ACKNOWLEDGED, "skipped")
            self._check_record_type(notification, record)
            logger.debug("%s %s", IndexingState.RESOLVED.value, key)
            document = build_search_document(record)
            logger.debug("%s %s", IndexingState.TRANSFORMED.value, key)
            action = "upserted"

            def apply() -> Awaitable[None]:
                return self.search_index.upsert(document)

        try:
            await retry_async(
                apply,
                self.retry_policy,
                retry_on=(ExternalServiceError,),
                operation_name=f"index {action[:-2]} {key}",
                sleep=self._sleep,
            )
        except ExternalServiceError:
            logger.error("%s %s: index write exhausted retries", IndexingState.FAILED.value, key)
            raise
        logger.debug("%s %s (%s)", IndexingState.APPLIED.value, key, action)

        invalidated = False
        if invalidate:
            invalidated = await self.invalidate_cache()
            logger.debug("%s %s: %s", IndexingState.INVALIDATED.value, key, invalidated)

        logger.info("Indexed %s (%s)", key, action)
        return IndexingOutcome(notification, IndexingState.ACKNOWLEDGED, action, invalidated)

    @staticmethod
    def _check_record_type(notification: ChangeNotification, record: ShowRecord | EpisodeRecord) -> None:
        expected = EpisodeRecord if notification.entity_type is EntityType.EPISODE else ShowRecord
        if not isinstance(record, expected):
            raise RecordTypeMismatchError(notification.index_key, type(record).__name__)

    @asynccontextmanager
    async def _key_lock(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                self._locks.pop(key, None)
