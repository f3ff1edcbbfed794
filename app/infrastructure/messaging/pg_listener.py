"""Postgres LISTEN/NOTIFY change listener.

Table triggers publish {"operation", "id"} on show_changes and
episode_changes. The listener keeps a dedicated asyncpg connection,
turns each payload into a ChangeNotification and hands it to the
consumer. NOTIFY has no redelivery: anything published while the
connection is down is lost, so a reconnect logs a reindex hint.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import asyncpg

from app.application.use_cases.sync import SyncService
from app.core.constants import CHANNEL_EPISODE_CHANGES, CHANNEL_SHOW_CHANGES
from app.domain.entities.change_notification import ChangeNotification
from app.domain.enums import EntityType
from app.domain.exceptions import MalformedNotificationError

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS: Mapping[str, EntityType] = {
    CHANNEL_SHOW_CHANGES: EntityType.SHOW,
    CHANNEL_EPISODE_CHANGES: EntityType.EPISODE,
}

Connect = Callable[[str], Awaitable[Any]]


class ChangeListener:
    """Dispatches DB change notifications into the indexing consumer."""

    def __init__(
        self,
        dsn: str,
        consumer: SyncService,
        *,
        channels: Mapping[str, EntityType] = DEFAULT_CHANNELS,
        reconnect_delay: float = 5.0,
        connect: Connect = asyncpg.connect,
    ) -> None:
        self.dsn = dsn
        self.consumer = consumer
        self.channels = dict(channels)
        self.reconnect_delay = reconnect_delay
        self._connect = connect
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()
        self._pending: set[asyncio.Task[None]] = set()
        self._connected_once = False

    def start(self) -> None:
        if self._task is None:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run(), name="pg-change-listener")

    async def stop(self) -> None:
        """Stop listening and wait for in-flight notifications to finish."""
        self._stopping.set()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        logger.info("Change listener stopped")

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await self._listen()
            except (OSError, asyncpg.PostgresError) as e:
                logger.warning(
                    "Change listener connection lost: %s; reconnecting in %ss",
                    e,
                    self.reconnect_delay,
                )
            except Exception:
                logger.exception("Change listener failed; reconnecting in %ss", self.reconnect_delay)
            if not self._stopping.is_set():
                await asyncio.sleep(self.reconnect_delay)

    async def _listen(self) -> None:
        conn = await self._connect(self.dsn)
        closed = asyncio.Event()
        conn.add_termination_listener(lambda _conn: closed.set())
        try:
            for channel in self.channels:
                await conn.add_listener(channel, self._on_notify)
            if self._connected_once:
                logger.warning(
                    "Change listener reconnected; changes made while disconnected "
                    "were not delivered. Run scripts/reindex_all.py to resync."
                )
            self._connected_once = True
            logger.info("Listening on %s", ", ".join(self.channels))
            await closed.wait()
        finally:
            if not conn.is_closed():
                await conn.close()

    def _on_notify(self, _conn: Any, _pid: int, channel: str, payload: str) -> None:
        task = asyncio.create_task(self.handle(channel, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def handle(self, channel: str, payload: str) -> bool:
        """Process one channel payload. Returns True when acknowledged."""
        entity_type = self.channels.get(channel)
        if entity_type is None:
            logger.warning("Ignoring notification on unknown channel %s", channel)
            return False
        try:
            notification = ChangeNotification.from_db_payload(entity_type, payload)
        except MalformedNotificationError as e:
            logger.error("Malformed notification on %s: %s", channel, e.details)
            return False
        try:
            await self.consumer.process(notification)
        except Exception:
            logger.exception(
                "Indexing failed for %s from %s; it will not be redelivered",
                notification.index_key,
                channel,
            )
            return False
        return True
