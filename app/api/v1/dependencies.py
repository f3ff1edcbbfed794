"""Presentation-layer dependency injection.

Long-lived services (discovery, consumer, queue) are built once in the
lifespan and read from app.state; request-scoped ones (content writes)
are built here around a DB session. Routes depend only on these.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.services import IIndexQueue
from app.application.use_cases.content import ContentService
from app.application.use_cases.discovery import DiscoveryService
from app.application.use_cases.sync import SyncService
from app.infrastructure.persistence.database import get_db
from app.infrastructure.persistence.repositories.content_repo import SqlContentRepository


def _from_state(request: Request, name: str, label: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} is not configured")
    return service


def get_discovery_service(request: Request) -> DiscoveryService:
    return _from_state(request, "discovery_service", "Search index")


def get_sync_service(request: Request) -> SyncService:
    return _from_state(request, "sync_service", "Indexing consumer")


def get_index_queue(request: Request) -> IIndexQueue:
    return _from_state(request, "index_queue", "Index queue")


def get_content_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    queue: Annotated[IIndexQueue, Depends(get_index_queue)],
) -> ContentService:
    """Content writes commit on the request session, then enqueue."""
    return ContentService(SqlContentRepository(db), queue)
