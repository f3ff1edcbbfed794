"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.episode import Episode
from app.infrastructure.persistence.models.mixins import CatalogModel, CuidMixin, TimestampMixin
from app.infrastructure.persistence.models.show import Show

__all__ = [
    "CatalogModel",
    "CuidMixin",
    "Episode",
    "Show",
    "TimestampMixin",
]
