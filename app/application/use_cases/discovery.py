"""Discovery reads (search, featured) behind a cache-aside layer.

The cache is best-effort: read or write failures are logged and treated as a
miss or a skipped write. Only search index failures reach the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.application.dtos.search import SearchFilters
from app.application.interfaces.services import ICacheService, ISearchIndex
from app.application.services.cache_keys import featured_key, normalize_query, search_key
from app.core.constants import FEATURED_DEFAULT_LIMIT
from app.domain.exceptions import ExternalServiceError, ValidationException
from app.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

# Accepted spellings for filter keys passed as a mapping.
_FILTER_ALIASES = {
    "category": "category",
    "language": "language",
    "minDuration": "min_duration",
    "min_duration": "min_duration",
    "maxDuration": "max_duration",
    "max_duration": "max_duration",
}


def coerce_filters(filters: SearchFilters | Mapping[str, Any] | None) -> SearchFilters:
    """Build SearchFilters from a dataclass, a mapping (camel or snake keys), or None.

    Raises:
        ValidationException: On unknown keys or non-integer duration bounds.
    """
    if filters is None:
        return SearchFilters()
    if isinstance(filters, SearchFilters):
        return filters
    values: dict[str, Any] = {}
    for key, value in filters.items():
        field = _FILTER_ALIASES.get(key)
        if field is None:
            raise ValidationException(f"Unknown search filter: {key!r}", field=key)
        if value is None:
            continue
        if field in ("min_duration", "max_duration"):
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise ValidationException(f"{key} must be an integer", field=key) from None
        values[field] = value
    return SearchFilters(**values)


class DiscoveryService:
    """Cache-aside search and featured content over the search index."""

    def __init__(
        self,
        search_index: ISearchIndex,
        cache: ICacheService | None = None,
        *,
        search_ttl: int = 300,
        featured_ttl: int = 600,
        featured_default_limit: int = FEATURED_DEFAULT_LIMIT,
    ) -> None:
        self.search_index = search_index
        self.cache = cache
        self.search_ttl = search_ttl
        self.featured_ttl = featured_ttl
        self.featured_default_limit = featured_default_limit

    @traced("discovery.search")
    async def search(
        self,
        query: str | None = "",
        filters: SearchFilters | Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Full-text search with facet filters; at most 50 documents in relevance order."""
        resolved = coerce_filters(filters)
        q = normalize_query(query)
        key = search_key(q, resolved.as_params())

        cached = await self._cache_get(key)
        if cached is not None:
            add_span_attributes(cache_hit=True)
            return cached

        add_span_attributes(cache_hit=False)
        results = await self.search_index.search(q, resolved)
        await self._cache_set(key, results, self.search_ttl)
        return results

    @traced("discovery.featured")
    async def featured(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Newest documents first, truncated to limit (default 10)."""
        if limit is None:
            limit = self.featured_default_limit
        if limit < 1:
            raise ValidationException("limit must be >= 1", field="limit")
        key = featured_key(limit)

        cached = await self._cache_get(key)
        if cached is not None:
            add_span_attributes(cache_hit=True)
            return cached

        add_span_attributes(cache_hit=False)
        results = (await self.search_index.featured(limit))[:limit]
        await self._cache_set(key, results, self.featured_ttl)
        return results

    async def _cache_get(self, key: str) -> Any:
        if self.cache is None or not self.cache.is_available():
            return None
        try:
            return await self.cache.get(key)
        except ExternalServiceError as e:
            logger.warning("Cache read failed for %s, falling through to index: %s", key, e)
            return None

    async def _cache_set(self, key: str, value: Any, ttl: int) -> None:
        if self.cache is None or not self.cache.is_available():
            return
        try:
            await self.cache.set(key, value, ttl=ttl)
        except ExternalServiceError as e:
            logger.warning("Cache write skipped for %s: %s", key, e)
