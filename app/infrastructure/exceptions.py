"""Infrastructure exceptions for outbound dependencies.

All extend ExternalServiceError so the retry executor and the presentation
layer treat them uniformly without importing infrastructure.
"""

from app.domain.exceptions import ExternalServiceError


class SearchIndexError(ExternalServiceError):
    """Search index request failed (transport error or error response)."""

    def __init__(self, operation: str, reason: str, index_key: str | None = None) -> None:
        details = {"operation": operation, "reason": reason}
        if index_key:
            details["index_key"] = index_key
        super().__init__(
            f"Search index {operation} failed: {reason}",
            "SEARCH_INDEX_ERROR",
            details,
        )


class QueuePublishError(ExternalServiceError):
    """Sending a message to the indexing queue failed."""

    def __init__(self, reason: str, queue_url: str | None = None) -> None:
        super().__init__(
            f"Failed to publish index message: {reason}",
            "QUEUE_PUBLISH_ERROR",
            {"reason": reason, "queue_url": queue_url},
        )


class CacheUnavailableError(ExternalServiceError):
    """Cache operation failed or the cache is not connected."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Cache {operation} failed: {reason}",
            "CACHE_UNAVAILABLE",
            {"operation": operation, "reason": reason},
        )
