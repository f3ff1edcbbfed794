"""Sync API schemas: queue push delivery and reindex results."""

from pydantic import BaseModel, ConfigDict, Field


class QueueRecord(BaseModel):
    """One delivered queue message. body is the notification JSON string."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    body: str
    message_id: str | None = Field(default=None, alias="messageId")


class QueueDeliveryRequest(BaseModel):
    """Push delivery envelope: {"Records": [{"body": "..."}]}."""

    model_config = ConfigDict(populate_by_name=True)

    records: list[QueueRecord] = Field(..., alias="Records")


class SyncProcessResponse(BaseModel):
    """Batch outcome. failed is always 0 here; failures return an error status."""

    status: str = "processed"
    count: int
    succeeded: int
    skipped: int
    failed: int = 0


class ReindexResponse(BaseModel):
    """Full reindex outcome."""

    status: str
    succeeded: int
    skipped: int
    failed: int
