"""Catalog content API schemas (shows and episodes)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ShowCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10_000)
    category: str = Field(..., min_length=1, max_length=100)
    language: str = Field(..., min_length=2, max_length=10)
    thumbnail_url: str | None = Field(default=None, max_length=2048)
    cover_image_url: str | None = Field(default=None, max_length=2048)


class ShowUpdateRequest(BaseModel):
    """PATCH body; only fields present in the request are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10_000)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    language: str | None = Field(default=None, min_length=2, max_length=10)
    thumbnail_url: str | None = Field(default=None, max_length=2048)
    cover_image_url: str | None = Field(default=None, max_length=2048)
    is_active: bool | None = None


class ShowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str | None
    category: str
    language: str
    thumbnail_url: str | None = None
    cover_image_url: str | None = None
    is_active: bool
    created_at: datetime


class EpisodeCreateRequest(BaseModel):
    show_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10_000)
    episode_number: int = Field(..., ge=0)
    duration: int = Field(..., ge=0, description="Seconds")
    audio_url: str = Field(..., min_length=1, max_length=2048)
    thumbnail_url: str | None = Field(default=None, max_length=2048)


class EpisodeUpdateRequest(BaseModel):
    """PATCH body; only fields present in the request are applied."""

    show_id: str | None = Field(default=None, min_length=1)
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10_000)
    episode_number: int | None = Field(default=None, ge=0)
    duration: int | None = Field(default=None, ge=0)
    audio_url: str | None = Field(default=None, min_length=1, max_length=2048)
    thumbnail_url: str | None = Field(default=None, max_length=2048)
    is_published: bool | None = None


class EpisodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    show_id: str
    title: str
    description: str | None
    episode_number: int
    duration: int
    audio_url: str | None = None
    thumbnail_url: str | None = None
    is_published: bool
    created_at: datetime
