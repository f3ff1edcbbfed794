"""OpenSearch request bodies: index mappings, search and featured queries."""

from typing import Any

from app.application.dtos.search import SearchFilters
from app.core.constants import FEATURED_DEFAULT_LIMIT, SEARCH_MAX_RESULTS, TITLE_BOOST

INDEX_MAPPINGS: dict[str, Any] = {
    "mappings": {
        "properties": {
            "id": {"type": "keyword"},
            "entityType": {"type": "keyword"},
            "title": {"type": "text", "analyzer": "standard"},
            "description": {"type": "text", "analyzer": "standard"},
            "category": {"type": "keyword"},
            "language": {"type": "keyword"},
            "duration": {"type": "integer"},
            "showId": {"type": "keyword"},
            "episodeNumber": {"type": "integer"},
            "createdAt": {"type": "date"},
        }
    }
}


def build_search_query(
    query: str,
    filters: SearchFilters | None = None,
    size: int = SEARCH_MAX_RESULTS,
) -> dict[str, Any]:
    """Relevance query: fuzzy multi_match on title (boosted) and description.

    An empty query matches everything. Filters are exact term/range clauses
    and do not affect scoring.
    """
    filters = filters or SearchFilters()
    if query:
        must: list[dict[str, Any]] = [
            {
                "multi_match": {
                    "query": query,
                    "fields": [f"title^{TITLE_BOOST}", "description"],
                    "fuzziness": "AUTO",
                }
            }
        ]
    else:
        must = [{"match_all": {}}]

    filter_clauses: list[dict[str, Any]] = []
    if filters.category:
        filter_clauses.append({"term": {"category": filters.category}})
    if filters.language:
        filter_clauses.append({"term": {"language": filters.language}})
    if filters.has_duration_range:
        duration_range: dict[str, int] = {}
        if filters.min_duration is not None:
            duration_range["gte"] = filters.min_duration
        if filters.max_duration is not None:
            duration_range["lte"] = filters.max_duration
        filter_clauses.append({"range": {"duration": duration_range}})

    return {
        "query": {"bool": {"must": must, "filter": filter_clauses}},
        "size": size,
    }


def build_featured_query(limit: int = FEATURED_DEFAULT_LIMIT) -> dict[str, Any]:
    """Newest documents first."""
    return {
        "query": {"match_all": {}},
        "sort": [{"createdAt": {"order": "desc"}}],
        "size": limit,
    }
