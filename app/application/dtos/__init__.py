"""Application DTOs (no ORM dependency)."""

from app.application.dtos.content import EpisodeCreate, EpisodeRecord, ShowCreate, ShowRecord
from app.application.dtos.search import SearchDocument, SearchFilters

__all__ = [
    "EpisodeCreate",
    "EpisodeRecord",
    "SearchDocument",
    "SearchFilters",
    "ShowCreate",
    "ShowRecord",
]
