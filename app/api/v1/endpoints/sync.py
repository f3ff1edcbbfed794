"""Sync API: queue push delivery into the indexing consumer, and full reindex."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import get_sync_service
from app.application.use_cases.sync import SyncService
from app.domain.entities.change_notification import ChangeNotification
from app.schemas.sync import QueueDeliveryRequest, ReindexResponse, SyncProcessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/process", response_model=SyncProcessResponse)
async def process_delivery(
    body: QueueDeliveryRequest,
    sync: Annotated[SyncService, Depends(get_sync_service)],
) -> SyncProcessResponse:
    """Run a delivered batch through the consumer.

    Every record is parsed before any is processed; a malformed record
    rejects the whole delivery with 400. Any record that fails to apply
    makes the response an error so the queue redelivers the batch.
    """
    notifications = [ChangeNotification.from_json(record.body) for record in body.records]
    result = await sync.process_batch(notifications)
    result.raise_for_failures()
    return SyncProcessResponse(
        count=result.total,
        succeeded=result.succeeded,
        skipped=result.skipped,
    )


@router.post("/reindex", response_model=ReindexResponse)
async def reindex(
    sync: Annotated[SyncService, Depends(get_sync_service)],
) -> ReindexResponse:
    """Rebuild every show and episode document from the record store."""
    result = await sync.reindex_all()
    return ReindexResponse(
        status="completed" if result.failed == 0 else "completed_with_errors",
        succeeded=result.succeeded,
        skipped=result.skipped,
        failed=result.failed,
    )
