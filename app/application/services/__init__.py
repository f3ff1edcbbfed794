"""Application services: cache key format and search document building."""

from app.application.services.cache_keys import (
    featured_key,
    namespace_pattern,
    normalize_query,
    search_key,
)
from app.application.services.search_document_builder import (
    build_episode_document,
    build_search_document,
    build_show_document,
)

__all__ = [
    "build_episode_document",
    "build_search_document",
    "build_show_document",
    "featured_key",
    "namespace_pattern",
    "normalize_query",
    "search_key",
]
