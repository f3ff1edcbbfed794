"""Show/episode repositories and the record-store reader used by the indexer."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.application.dtos.content import EpisodeCreate, EpisodeRecord, ShowCreate, ShowRecord
from app.domain.enums import EntityType
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.episode import Episode
from app.infrastructure.persistence.models.show import Show
from app.infrastructure.persistence.repositories.base import BaseRepository


def to_show_record(show: Show) -> ShowRecord:
    return ShowRecord(
        id=show.id,
        title=show.title,
        description=show.description,
        category=show.category,
        language=show.language,
        created_at=show.created_at,
        thumbnail_url=show.thumbnail_url,
        cover_image_url=show.cover_image_url,
        is_active=show.is_active,
    )


def to_episode_record(episode: Episode, show: Show | None) -> EpisodeRecord:
    return EpisodeRecord(
        id=episode.id,
        show_id=episode.show_id,
        title=episode.title,
        description=episode.description,
        episode_number=episode.episode_number,
        duration=episode.duration,
        created_at=episode.created_at,
        show=to_show_record(show) if show is not None else None,
        audio_url=episode.audio_url,
        thumbnail_url=episode.thumbnail_url,
        is_published=episode.is_published,
    )


class ShowRepository(BaseRepository[Show]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Show)

    async def episode_ids(self, show_id: str) -> list[str]:
        result = await self.db.execute(
            select(Episode.id).where(Episode.show_id == show_id).order_by(Episode.episode_number)
        )
        return list(result.scalars().all())


class EpisodeRepository(BaseRepository[Episode]):
    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Episode)

    async def get_with_show(self, episode_id: str) -> Episode | None:
        result = await self.db.execute(
            select(Episode).options(selectinload(Episode.show)).where(Episode.id == episode_id)
        )
        return result.scalar_one_or_none()


class SqlContentRepository:
    """Write path over one session. commit() ends the unit of work."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.shows = ShowRepository(db)
        self.episodes = EpisodeRepository(db)

    async def get_show(self, show_id: str) -> ShowRecord | None:
        show = await self.shows.get_by_id(show_id)
        return to_show_record(show) if show else None

    async def get_episode(self, episode_id: str) -> EpisodeRecord | None:
        episode = await self.episodes.get_with_show(episode_id)
        return to_episode_record(episode, episode.show) if episode else None

    async def episode_ids_for_show(self, show_id: str) -> list[str]:
        return await self.shows.episode_ids(show_id)

    async def create_show(self, data: ShowCreate) -> ShowRecord:
        show = await self.shows.create(
            Show(
                title=data.title,
                description=data.description,
                category=data.category,
                language=data.language,
                thumbnail_url=data.thumbnail_url,
                cover_image_url=data.cover_image_url,
            )
        )
        return to_show_record(show)

    async def update_show(self, show_id: str, changes: Mapping[str, Any]) -> ShowRecord | None:
        show = await self.shows.get_by_id(show_id)
        if show is None:
            return None
        return to_show_record(await self.shows.update(show, changes))

    async def delete_show(self, show_id: str) -> list[str] | None:
        show = await self.shows.get_by_id(show_id)
        if show is None:
            return None
        episode_ids = await self.shows.episode_ids(show_id)
        await self.shows.delete(show)
        return episode_ids

    async def create_episode(self, data: EpisodeCreate) -> EpisodeRecord:
        show = await self.shows.get_by_id(data.show_id)
        if show is None:
            raise ResourceNotFoundException("show", data.show_id)
        episode = await self.episodes.create(
            Episode(
                show_id=data.show_id,
                title=data.title,
                description=data.description,
                episode_number=data.episode_number,
                duration=data.duration,
                audio_url=data.audio_url,
                thumbnail_url=data.thumbnail_url,
            )
        )
        return to_episode_record(episode, show)

    async def update_episode(self, episode_id: str, changes: Mapping[str, Any]) -> EpisodeRecord | None:
        episode = await self.episodes.get_with_show(episode_id)
        if episode is None:
            return None
        if "show_id" in changes and changes["show_id"] != episode.show_id:
            if await self.shows.get_by_id(changes["show_id"]) is None:
                raise ResourceNotFoundException("show", str(changes["show_id"]))
        episode = await self.episodes.update(episode, changes)
        refreshed = await self.episodes.get_with_show(episode.id)
        return to_episode_record(episode, refreshed.show if refreshed else None)

    async def delete_episode(self, episode_id: str) -> bool:
        episode = await self.episodes.get_by_id(episode_id)
        if episode is None:
            return False
        await self.episodes.delete(episode)
        return True

    async def commit(self) -> None:
        await self.db.commit()


class SqlContentReader:
    """Record-store reader for the indexing consumer.

    Opens a short-lived session per call; the consumer is long-lived and
    shared by the queue worker, the DB listener and the HTTP push endpoint.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch(self, entity_type: EntityType, entity_id: str) -> ShowRecord | EpisodeRecord | None:
        async with self._session_factory() as session:
            if entity_type is EntityType.SHOW:
                show = await ShowRepository(session).get_by_id(entity_id)
                return to_show_record(show) if show else None
            episode = await EpisodeRepository(session).get_with_show(entity_id)
            return to_episode_record(episode, episode.show) if episode else None

    async def iter_ids(self, entity_type: EntityType, batch_size: int = 500) -> AsyncIterator[str]:
        """Keyset-paginated walk over every id of a type."""
        model: Any = Show if entity_type is EntityType.SHOW else Episode
        last_id: str | None = None
        while True:
            stmt = select(model.id).order_by(model.id).limit(batch_size)
            if last_id is not None:
                stmt = stmt.where(model.id > last_id)
            async with self._session_factory() as session:
                ids = list((await session.execute(stmt)).scalars().all())
            if not ids:
                return
            for entity_id in ids:
                yield entity_id
            last_id = ids[-1]
