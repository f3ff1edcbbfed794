"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import TYPE_CHECKING, Any, Protocol

from app.domain.enums import EntityType

if TYPE_CHECKING:
    from app.application.dtos.content import (
        EpisodeCreate,
        EpisodeRecord,
        ShowCreate,
        ShowRecord,
    )


# Record store read access used by the indexing consumer
class IContentReader(Protocol):
    """Read-only access to canonical show/episode state."""

    async def fetch(
        self, entity_type: EntityType, entity_id: str
    ) -> ShowRecord | EpisodeRecord | None:
        """Return the current record, or None if it no longer exists.

        Episodes are returned with their parent show resolved (show=None when
        the parent row is missing).
        """

    def iter_ids(self, entity_type: EntityType, batch_size: int = 500) -> AsyncIterator[str]:
        """Yield every id of the given type (used by full reindex)."""


# Write path used by the content service
class IContentRepository(Protocol):
    """Create/update/delete shows and episodes inside one unit of work."""

    async def get_show(self, show_id: str) -> ShowRecord | None:
        """Return the show or None."""

    async def get_episode(self, episode_id: str) -> EpisodeRecord | None:
        """Return the episode with its show resolved, or None."""

    async def episode_ids_for_show(self, show_id: str) -> list[str]:
        """Ids of the show's episodes in episode-number order."""

    async def create_show(self, data: ShowCreate) -> ShowRecord:
        """Insert a show and return it."""

    async def update_show(self, show_id: str, changes: Mapping[str, Any]) -> ShowRecord | None:
        """Apply changes; return updated show or None if not found."""

    async def delete_show(self, show_id: str) -> list[str] | None:
        """Delete a show; return ids of episodes removed with it, or None if not found."""

    async def create_episode(self, data: EpisodeCreate) -> EpisodeRecord:
        """Insert an episode and return it."""

    async def update_episode(
        self, episode_id: str, changes: Mapping[str, Any]
    ) -> EpisodeRecord | None:
        """Apply changes; return updated episode or None if not found."""

    async def delete_episode(self, episode_id: str) -> bool:
        """Delete an episode; return False if not found."""

    async def commit(self) -> None:
        """Commit the unit of work."""
