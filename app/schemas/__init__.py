"""Pydantic request/response schemas for the API."""

from app.schemas.content import (
    EpisodeCreateRequest,
    EpisodeResponse,
    EpisodeUpdateRequest,
    ShowCreateRequest,
    ShowResponse,
    ShowUpdateRequest,
)
from app.schemas.discovery import DiscoveryResponse, SearchDocumentResponse
from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.sync import QueueDeliveryRequest, QueueRecord, ReindexResponse, SyncProcessResponse

__all__ = [
    "DiscoveryResponse",
    "EpisodeCreateRequest",
    "EpisodeResponse",
    "EpisodeUpdateRequest",
    "HealthResponse",
    "QueueDeliveryRequest",
    "QueueRecord",
    "ReadinessResponse",
    "ReindexResponse",
    "SearchDocumentResponse",
    "ShowCreateRequest",
    "ShowResponse",
    "ShowUpdateRequest",
    "SyncProcessResponse",
]
