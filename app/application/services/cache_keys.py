"""Cache key builders for discovery reads. Single place for key format (DRY).

Search keys are 'search:<query>:<k:v|k:v...>' with filters sorted by key name,
so the same filter set yields the same key regardless of argument order.
"""

from collections.abc import Mapping
from typing import Any

from app.core.constants import (
    CACHE_FILTER_SEP,
    CACHE_KEY_SEP,
    CACHE_PREFIX_FEATURED,
    CACHE_PREFIX_SEARCH,
)


def normalize_query(query: str | None) -> str:
    """Strip surrounding whitespace; None becomes ''."""
    return (query or "").strip()


def search_key(query: str | None, filters: Mapping[str, Any] | None = None) -> str:
    """Cache key for a search. None and empty-string filters are not part of the key."""
    parts = sorted(
        (str(k), v) for k, v in (filters or {}).items() if v is not None and v != ""
    )
    filter_str = CACHE_FILTER_SEP.join(f"{k}{CACHE_KEY_SEP}{v}" for k, v in parts)
    return (
        f"{CACHE_PREFIX_SEARCH}{CACHE_KEY_SEP}{normalize_query(query)}"
        f"{CACHE_KEY_SEP}{filter_str}"
    )


def featured_key(limit: int) -> str:
    """Cache key for featured content at a given limit."""
    return f"{CACHE_PREFIX_FEATURED}{CACHE_KEY_SEP}{limit}"


def namespace_pattern(prefix: str) -> str:
    """Redis SCAN pattern matching every key under prefix (e.g. 'search:*')."""
    return f"{prefix}{CACHE_KEY_SEP}*"
