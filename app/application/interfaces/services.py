"""Service interfaces (ports) for the application layer.

Protocols define contracts for the outbound collaborators of the sync
pipeline: search index, cache, and index queue (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.search import SearchDocument, SearchFilters
    from app.domain.entities.change_notification import ChangeNotification


# Search index interface
class ISearchIndex(Protocol):
    """Protocol for the search index store (OpenSearch in production).

    Write methods raise ExternalServiceError subclasses on transport failure.
    """

    async def upsert(self, document: SearchDocument) -> None:
        """Index document under document.index_key, overwriting any previous version."""

    async def delete(self, index_key: str) -> bool:
        """Delete the document; absent documents are not an error (returns False)."""

    async def search(
        self, query: str, filters: SearchFilters | None = None
    ) -> list[dict[str, Any]]:
        """Return stored documents in relevance order (capped result size)."""

    async def featured(self, limit: int) -> list[dict[str, Any]]:
        """Return the newest documents by createdAt, at most limit."""


# Cache interface
class ICacheService(Protocol):
    """Cache used by the cache-aside read layer and its invalidation."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""

    async def delete_pattern(self, pattern: str, *, strict: bool = False) -> int:
        """Delete keys matching pattern. Returns count deleted.

        With strict=True, raises CacheUnavailableError instead of returning 0
        on failure (lets callers retry).
        """


# Index queue interface
class IIndexQueue(Protocol):
    """Application-level change channel (SQS in production)."""

    async def send_index_message(self, notification: ChangeNotification) -> str | None:
        """Enqueue a change notification; returns the message id (None if disabled)."""
