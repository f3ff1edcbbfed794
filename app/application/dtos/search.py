"""DTOs for the search index: documents and query filters (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.domain.enums import EntityType


@dataclass(frozen=True)
class SearchDocument:
    """Document stored in the search index for a show or an episode.

    Derived, never owned: always rebuilt from the record store at indexing time.
    Episode-only fields (duration, show_id, episode_number) are None for shows.
    """

    id: str
    entity_type: EntityType
    title: str
    description: str
    category: str
    language: str
    created_at: str  # ISO-8601 UTC
    duration: int | None = None
    show_id: str | None = None
    episode_number: int | None = None

    @property
    def index_key(self) -> str:
        """Document id in the index; same format as ChangeNotification.index_key."""
        return f"{self.entity_type.value}_{self.id}"

    def to_source(self) -> dict[str, Any]:
        """Index body (camelCase, matches the index mappings). Omits None episode fields."""
        source: dict[str, Any] = {
            "id": self.id,
            "entityType": self.entity_type.value,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "language": self.language,
            "createdAt": self.created_at,
        }
        if self.duration is not None:
            source["duration"] = self.duration
        if self.show_id is not None:
            source["showId"] = self.show_id
        if self.episode_number is not None:
            source["episodeNumber"] = self.episode_number
        return source


@dataclass(frozen=True)
class SearchFilters:
    """Facet filters for search. Every field is optional; set filters are ANDed."""

    category: str | None = None
    language: str | None = None
    min_duration: int | None = None
    max_duration: int | None = None

    def as_params(self) -> dict[str, str | int]:
        """Set filters keyed by their public (camelCase) names; None values dropped."""
        params: dict[str, str | int | None] = {
            "category": self.category,
            "language": self.language,
            "minDuration": self.min_duration,
            "maxDuration": self.max_duration,
        }
        return {k: v for k, v in params.items() if v is not None}

    @property
    def has_duration_range(self) -> bool:
        return self.min_duration is not None or self.max_duration is not None
