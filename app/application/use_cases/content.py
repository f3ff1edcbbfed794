"""Show/episode write path. Commits first, then enqueues index messages.

The enqueue happens after commit so the consumer never re-reads a row
that is not yet visible. Show changes that alter category or language
also enqueue their episodes, since episode documents carry those facets.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.application.dtos.content import EpisodeCreate, EpisodeRecord, ShowCreate, ShowRecord
from app.application.interfaces.repositories import IContentRepository
from app.application.interfaces.services import IIndexQueue
from app.domain.entities.change_notification import ChangeNotification
from app.domain.enums import ChangeOperation, EntityType
from app.domain.exceptions import ResourceNotFoundException, ValidationException

logger = logging.getLogger(__name__)

SHOW_UPDATABLE_FIELDS = frozenset(
    {"title", "description", "category", "language", "thumbnail_url", "cover_image_url", "is_active"}
)
EPISODE_UPDATABLE_FIELDS = frozenset(
    {
        "show_id",
        "title",
        "description",
        "episode_number",
        "duration",
        "audio_url",
        "thumbnail_url",
        "is_published",
    }
)
# Show fields copied onto episode documents.
_INHERITED_FACETS = frozenset({"category", "language"})


def _check_changes(changes: Mapping[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationException(f"Unknown field(s): {', '.join(unknown)}", field=unknown[0])
    if not changes:
        raise ValidationException("No changes given")
    for field in ("duration", "episode_number"):
        value = changes.get(field)
        if value is not None and (not isinstance(value, int) or value < 0):
            raise ValidationException(f"{field} must be a non-negative integer", field=field)
    return dict(changes)


class ContentService:
    """Catalog CRUD that feeds the application-level change channel."""

    def __init__(self, repository: IContentRepository, queue: IIndexQueue) -> None:
        self.repository = repository
        self.queue = queue

    async def get_show(self, show_id: str) -> ShowRecord:
        show = await self.repository.get_show(show_id)
        if show is None:
            raise ResourceNotFoundException("show", show_id)
        return show

    async def get_episode(self, episode_id: str) -> EpisodeRecord:
        episode = await self.repository.get_episode(episode_id)
        if episode is None:
            raise ResourceNotFoundException("episode", episode_id)
        return episode

    async def create_show(self, data: ShowCreate) -> ShowRecord:
        show = await self.repository.create_show(data)
        await self.repository.commit()
        await self._publish(EntityType.SHOW, show.id, ChangeOperation.CREATED)
        return show

    async def update_show(self, show_id: str, changes: Mapping[str, Any]) -> ShowRecord:
        checked = _check_changes(changes, SHOW_UPDATABLE_FIELDS)
        show = await self.repository.update_show(show_id, checked)
        if show is None:
            raise ResourceNotFoundException("show", show_id)
        episode_ids: list[str] = []
        if _INHERITED_FACETS & checked.keys():
            episode_ids = await self.repository.episode_ids_for_show(show_id)
        await self.repository.commit()
        await self._publish(EntityType.SHOW, show_id, ChangeOperation.UPDATED)
        for episode_id in episode_ids:
            await self._publish(EntityType.EPISODE, episode_id, ChangeOperation.UPDATED)
        return show

    async def delete_show(self, show_id: str) -> None:
        episode_ids = await self.repository.delete_show(show_id)
        if episode_ids is None:
            raise ResourceNotFoundException("show", show_id)
        await self.repository.commit()
        await self._publish(EntityType.SHOW, show_id, ChangeOperation.DELETED)
        for episode_id in episode_ids:
            await self._publish(EntityType.EPISODE, episode_id, ChangeOperation.DELETED)

    async def create_episode(self, data: EpisodeCreate) -> EpisodeRecord:
        if data.duration < 0 or data.episode_number < 0:
            raise ValidationException("duration and episode_number must be non-negative")
        episode = await self.repository.create_episode(data)
        await self.repository.commit()
        await self._publish(EntityType.EPISODE, episode.id, ChangeOperation.CREATED)
        return episode

    async def update_episode(self, episode_id: str, changes: Mapping[str, Any]) -> EpisodeRecord:
        checked = _check_changes(changes, EPISODE_UPDATABLE_FIELDS)
        episode = await self.repository.update_episode(episode_id, checked)
        if episode is None:
            raise ResourceNotFoundException("episode", episode_id)
        await self.repository.commit()
        await self._publish(EntityType.EPISODE, episode_id, ChangeOperation.UPDATED)
        return episode

    async def delete_episode(self, episode_id: str) -> None:
        if not await self.repository.delete_episode(episode_id):
            raise ResourceNotFoundException("episode", episode_id)
        await self.repository.commit()
        await self._publish(EntityType.EPISODE, episode_id, ChangeOperation.DELETED)

    async def _publish(self, entity_type: EntityType, entity_id: str, operation: ChangeOperation) -> None:
        notification = ChangeNotification(entity_type, entity_id, operation)
        try:
            await self.queue.send_index_message(notification)
        except Exception:
            logger.error(
                "Committed %s but could not enqueue %s; the index is stale until reindex",
                notification.index_key,
                notification.message_type,
            )
            raise
