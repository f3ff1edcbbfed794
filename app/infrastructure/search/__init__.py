"""Search index: OpenSearch client and query builders."""

from app.infrastructure.search.opensearch_client import SearchIndexClient, create_opensearch_client
from app.infrastructure.search.queries import INDEX_MAPPINGS, build_featured_query, build_search_query

__all__ = [
    "INDEX_MAPPINGS",
    "SearchIndexClient",
    "build_featured_query",
    "build_search_query",
    "create_opensearch_client",
]
