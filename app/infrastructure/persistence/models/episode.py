"""Episode ORM model. Table: episode. FK show_id with ON DELETE CASCADE."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import CatalogModel

if TYPE_CHECKING:
    from app.infrastructure.persistence.models.show import Show


class Episode(CatalogModel, Base):
    """An episode of a show. duration is in seconds."""

    __tablename__ = "episode"

    show_id: Mapped[str] = mapped_column(
        String, ForeignKey("show.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    audio_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    show: Mapped["Show"] = relationship(back_populates="episodes")

    __table_args__ = (
        UniqueConstraint("show_id", "episode_number", name="uq_episode_show_number"),
    )
