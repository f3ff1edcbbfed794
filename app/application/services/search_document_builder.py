"""Map catalog records to search documents.

Episodes inherit category and language from their parent show; the episode
row stores neither.
"""

from __future__ import annotations

from app.application.dtos.content import EpisodeRecord, ShowRecord
from app.application.dtos.search import SearchDocument
from app.domain.enums import EntityType
from app.domain.exceptions import MissingParentShowError
from app.shared.utils.datetime import to_iso_utc


def build_show_document(show: ShowRecord) -> SearchDocument:
    """Search document for a show."""
    return SearchDocument(
        id=show.id,
        entity_type=EntityType.SHOW,
        title=show.title,
        description=show.description or "",
        category=show.category,
        language=show.language,
        created_at=to_iso_utc(show.created_at) or "",
    )


def build_episode_document(episode: EpisodeRecord) -> SearchDocument:
    """Search document for an episode with facets taken from its show.

    Raises:
        MissingParentShowError: If episode.show is None.
    """
    show = episode.show
    if show is None:
        raise MissingParentShowError(episode.id, episode.show_id)
    return SearchDocument(
        id=episode.id,
        entity_type=EntityType.EPISODE,
        title=episode.title,
        description=episode.description or "",
        category=show.category,
        language=show.language,
        created_at=to_iso_utc(episode.created_at) or "",
        duration=episode.duration,
        show_id=episode.show_id,
        episode_number=episode.episode_number,
    )


def build_search_document(record: ShowRecord | EpisodeRecord) -> SearchDocument:
    """Dispatch on record type."""
    if isinstance(record, EpisodeRecord):
        return build_episode_document(record)
    return build_show_document(record)
