"""Application use cases: one entry point per workflow."""

from app.application.use_cases.content import ContentService
from app.application.use_cases.discovery import DiscoveryService, coerce_filters
from app.application.use_cases.sync import BatchResult, IndexingOutcome, SyncService

__all__ = [
    "BatchResult",
    "ContentService",
    "DiscoveryService",
    "IndexingOutcome",
    "SyncService",
    "coerce_filters",
]
