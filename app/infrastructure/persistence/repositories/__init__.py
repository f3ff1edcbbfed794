"""Persistence repositories: SQLAlchemy implementations of the content ports."""

from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.content_repo import (
    EpisodeRepository,
    ShowRepository,
    SqlContentReader,
    SqlContentRepository,
)

__all__ = [
    "BaseRepository",
    "EpisodeRepository",
    "ShowRepository",
    "SqlContentReader",
    "SqlContentRepository",
]
