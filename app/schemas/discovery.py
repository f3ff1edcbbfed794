"""Discovery API schemas. Documents are returned with their index field names (camelCase)."""

from pydantic import BaseModel, ConfigDict, Field


class SearchDocumentResponse(BaseModel):
    """One stored search document (show or episode)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    entity_type: str = Field(..., alias="entityType")
    title: str
    description: str | None = None
    category: str
    language: str
    created_at: str = Field(..., alias="createdAt")
    duration: int | None = None
    show_id: str | None = Field(default=None, alias="showId")
    episode_number: int | None = Field(default=None, alias="episodeNumber")


class DiscoveryResponse(BaseModel):
    """List of documents, relevance order for search, newest first for featured."""

    results: list[SearchDocumentResponse]
    count: int
