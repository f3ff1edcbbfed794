"""Show ORM model. Table: show. Parent of episodes; category and language live here."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CatalogModel

if TYPE_CHECKING:
    from app.infrastructure.persistence.models.episode import Episode


class Show(CatalogModel, Base):
    """A show (series). Deleting a show cascades to its episodes."""

    __tablename__ = "show"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    language: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    episodes: Mapped[list["Episode"]] = relationship(
        back_populates="show",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
