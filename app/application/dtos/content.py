"""DTOs for catalog records (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ShowRecord:
    """Show read-model as fetched from the record store."""

    id: str
    title: str
    description: str | None
    category: str
    language: str
    created_at: datetime
    thumbnail_url: str | None = None
    cover_image_url: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class EpisodeRecord:
    """Episode read-model.

    The episode row stores neither category nor language; show is the parent
    resolved in the same fetch (None when the parent row is gone).
    """

    id: str
    show_id: str
    title: str
    description: str | None
    episode_number: int
    duration: int
    created_at: datetime
    show: ShowRecord | None = None
    audio_url: str | None = None
    thumbnail_url: str | None = None
    is_published: bool = True


@dataclass(frozen=True)
class ShowCreate:
    """Input for creating a show."""

    title: str
    category: str
    language: str
    description: str | None = None
    thumbnail_url: str | None = None
    cover_image_url: str | None = None


@dataclass(frozen=True)
class EpisodeCreate:
    """Input for creating an episode under a show."""

    show_id: str
    title: str
    episode_number: int
    duration: int
    audio_url: str
    description: str | None = None
    thumbnail_url: str | None = None
