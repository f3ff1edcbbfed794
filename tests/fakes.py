"""In-memory fakes for the search index, result cache, record store and index queue."""

from __future__ import annotations

import fnmatch
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Any

from app.application.dtos.content import EpisodeRecord, ShowRecord
from app.application.dtos.search import SearchDocument, SearchFilters
from app.domain.entities.change_notification import ChangeNotification
from app.domain.enums import EntityType
from app.infrastructure.exceptions import CacheUnavailableError, QueuePublishError, SearchIndexError

CREATED_AT = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_show(
    show_id: str = "s1",
    title: str = "Tech Talk",
    category: str = "tech",
    language: str = "en",
    description: str | None = "Weekly technology news",
    created_at: datetime = CREATED_AT,
) -> ShowRecord:
    return ShowRecord(
        id=show_id,
        title=title,
        description=description,
        category=category,
        language=language,
        created_at=created_at,
    )


def make_episode(
    episode_id: str = "e1",
    show: ShowRecord | None = None,
    show_id: str | None = None,
    title: str = "Episode One",
    duration: int = 1800,
    episode_number: int = 1,
    description: str | None = "First episode",
    created_at: datetime = CREATED_AT,
) -> EpisodeRecord:
    return EpisodeRecord(
        id=episode_id,
        show_id=show_id or (show.id if show else "s1"),
        title=title,
        description=description,
        episode_number=episode_number,
        duration=duration,
        created_at=created_at,
        show=show,
    )


class FakeSearchIndex:
    """Dict-backed index keyed by '<entityType>_<id>'.

    fail_writes makes the next N upsert/delete calls raise SearchIndexError.
    """

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.fail_writes = 0
        self.fail_reads = False
        self.upserts: list[str] = []
        self.deletes: list[str] = []
        self.search_calls: list[tuple[str, SearchFilters | None]] = []
        self.featured_calls: list[int] = []

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_writes > 0:
            self.fail_writes -= 1
            raise SearchIndexError(operation, "simulated outage")

    async def upsert(self, document: SearchDocument) -> None:
        self._maybe_fail("upsert")
        self.upserts.append(document.index_key)
        self.documents[document.index_key] = document.to_source()

    async def delete(self, index_key: str) -> bool:
        self._maybe_fail("delete")
        self.deletes.append(index_key)
        return self.documents.pop(index_key, None) is not None

    async def search(self, query: str, filters: SearchFilters | None = None) -> list[dict[str, Any]]:
        if self.fail_reads:
            raise SearchIndexError("search", "simulated outage")
        self.search_calls.append((query, filters))
        filters = filters or SearchFilters()
        results = []
        for doc in self.documents.values():
            text = f"{doc['title']} {doc['description']}".lower()
            if query and query.lower() not in text:
                continue
            if filters.category and doc["category"] != filters.category:
                continue
            if filters.language and doc["language"] != filters.language:
                continue
            duration = doc.get("duration")
            if filters.min_duration is not None and (duration is None or duration < filters.min_duration):
                continue
            if filters.max_duration is not None and (duration is None or duration > filters.max_duration):
                continue
            results.append(doc)
        return results[:50]

    async def featured(self, limit: int) -> list[dict[str, Any]]:
        if self.fail_reads:
            raise SearchIndexError("featured", "simulated outage")
        self.featured_calls.append(limit)
        docs = sorted(self.documents.values(), key=lambda d: d["createdAt"], reverse=True)
        return docs[:limit]


class FakeCache:
    """In-memory cache with fnmatch-based delete_pattern.

    down makes every call behave like an unreachable Redis;
    fail_deletes makes the next N strict delete_pattern calls raise.
    """

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}
        self.down = False
        self.fail_deletes = 0
        self.deleted_patterns: list[str] = []

    def is_available(self) -> bool:
        return not self.down

    async def get(self, key: str) -> Any:
        if self.down:
            return None
        return self.store.get(key)

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        if self.down:
            return False
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete_pattern(self, pattern: str, *, strict: bool = False) -> int:
        if self.fail_deletes > 0:
            self.fail_deletes -= 1
            if strict:
                raise CacheUnavailableError("delete_pattern", "simulated outage")
            return 0
        self.deleted_patterns.append(pattern)
        matched = [k for k in self.store if fnmatch.fnmatchcase(k, pattern)]
        for key in matched:
            del self.store[key]
            self.ttls.pop(key, None)
        return len(matched)


class FakeContentReader:
    """Record store reader over dicts of shows and episodes."""

    def __init__(self) -> None:
        self.shows: dict[str, ShowRecord] = {}
        self.episodes: dict[str, EpisodeRecord] = {}
        self.fetches: list[tuple[EntityType, str]] = []

    def add_show(self, show: ShowRecord) -> ShowRecord:
        self.shows[show.id] = show
        return show

    def add_episode(self, episode: EpisodeRecord) -> EpisodeRecord:
        self.episodes[episode.id] = episode
        return episode

    async def fetch(self, entity_type: EntityType, entity_id: str) -> ShowRecord | EpisodeRecord | None:
        self.fetches.append((entity_type, entity_id))
        if entity_type is EntityType.SHOW:
            return self.shows.get(entity_id)
        return self.episodes.get(entity_id)

    async def iter_ids(self, entity_type: EntityType, batch_size: int = 500) -> AsyncIterator[str]:
        source = self.shows if entity_type is EntityType.SHOW else self.episodes
        for entity_id in sorted(source):
            yield entity_id


class FakeQueue:
    """Records sent notifications; fail makes send raise."""

    def __init__(self) -> None:
        self.sent: list[ChangeNotification] = []
        self.fail = False

    async def send_index_message(self, notification: ChangeNotification) -> str | None:
        if self.fail:
            raise QueuePublishError("simulated outage")
        self.sent.append(notification)
        return f"msg-{len(self.sent)}"


async def no_sleep(_seconds: float) -> None:
    return None
