"""Redis-backed result cache for discovery reads.

Holds cached search result lists and featured lists as JSON with a TTL.
Reads and writes degrade to a miss/no-op when Redis is down; namespace
invalidation can be asked to raise instead so the caller can retry it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis

from app.core.config import Settings, get_settings
from app.infrastructure.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNLINK_CHUNK = 500


class CacheService:
    """Async Redis cache with TTL support.

    Call connect() at startup and disconnect() at shutdown. A failed connect
    leaves the service unavailable; the app keeps serving from the index.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize cache service.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Optional settings; defaults to get_settings().
        """
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None

    def _build_client(self) -> redis.Redis:
        s = self.settings
        if s.redis_url:
            return redis.Redis.from_url(
                s.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
        return redis.Redis(
            host=s.redis_host,
            port=s.redis_port,
            db=s.redis_db,
            password=s.redis_password.get_secret_value() if s.redis_password else None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None and self._connected:
            return
        try:
            self.redis = self._build_client()
            await self.redis.ping()
            self._connected = True
            logger.info("Redis cache connected: %s", self._describe())
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Cache disabled.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis cache disconnected")

    async def _reconnect(self) -> bool:
        """Drop the current client and connect again. Returns True if reconnected."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError:
                logger.debug("Ignoring error while closing stale Redis client")
        self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def _describe(self) -> str:
        if self.settings.redis_url:
            return self.settings.redis_url.rsplit("@", 1)[-1]
        return f"{self.settings.redis_host}:{self.settings.redis_port}"

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def _call(self, operation: str, fn: Callable[[redis.Redis], Awaitable[T]]) -> T:
        """Run fn against the client, reconnecting once on a dropped connection.

        Raises:
            CacheUnavailableError: Not connected, or the call failed.
        """
        if not self.is_available() or self.redis is None:
            raise CacheUnavailableError(operation, "not connected")
        try:
            return await fn(self.redis)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            if await self._reconnect() and self.redis is not None:
                try:
                    return await fn(self.redis)
                except redis.RedisError as retry_error:
                    raise CacheUnavailableError(operation, str(retry_error)) from retry_error
            raise CacheUnavailableError(operation, str(e)) from e
        except redis.RedisError as e:
            raise CacheUnavailableError(operation, str(e)) from e

    async def get(self, key: str) -> Any | None:
        """Return cached value (JSON-deserialized) or None if missing/unavailable."""

        async def _get(client: redis.Redis) -> str | None:
            return await client.get(key)

        try:
            value = await self._call("get", _get)
        except CacheUnavailableError as e:
            logger.warning("Cache get unavailable for key %s: %s", key, e.details["reason"])
            return None
        if value is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value as JSON with TTL in seconds. Returns True on success."""
        serialized = json.dumps(value)

        async def _set(client: redis.Redis) -> Any:
            return await client.setex(key, ttl, serialized)

        try:
            await self._call("set", _set)
        except CacheUnavailableError as e:
            logger.warning("Cache set unavailable for key %s: %s", key, e.details["reason"])
            return False
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        return True

    async def delete_pattern(self, pattern: str, *, strict: bool = False) -> int:
        """Delete all keys matching pattern using SCAN + batched UNLINK.

        Args:
            pattern: Redis SCAN match pattern (e.g. search:*).
            strict: Raise CacheUnavailableError on failure instead of returning 0.

        Returns:
            Number of keys deleted.
        """

        async def _unlink(client: redis.Redis) -> int:
            deleted = 0
            chunk: list[str] = []
            async for key in client.scan_iter(match=pattern):
                chunk.append(key)
                if len(chunk) >= _UNLINK_CHUNK:
                    deleted += await _unlink_chunk(client, chunk)
                    chunk = []
            if chunk:
                deleted += await _unlink_chunk(client, chunk)
            return deleted

        try:
            deleted = await self._call("delete_pattern", _unlink)
        except CacheUnavailableError as e:
            if strict:
                raise
            logger.warning("Cache delete_pattern unavailable for %s: %s", pattern, e.details["reason"])
            return 0
        if deleted > 0:
            logger.info("Cache INVALIDATE: %s (%s keys)", pattern, deleted)
        return deleted


async def _unlink_chunk(client: redis.Redis, keys: list[str]) -> int:
    async with client.pipeline(transaction=False) as pipe:
        pipe.unlink(*keys)
        results = await pipe.execute()
    return sum(int(r or 0) for r in results)
