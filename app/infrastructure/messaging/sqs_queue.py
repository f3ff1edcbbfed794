"""SQS indexing queue: producer for the write path and a long-poll worker.

Uses boto3 (sync) via asyncio.to_thread for async API. Message body is
the ChangeNotification JSON; EntityType/EventType are also sent as
message attributes for queue-side filtering.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.application.use_cases.sync import SyncService
from app.core.config import Settings
from app.domain.entities.change_notification import ChangeNotification
from app.domain.exceptions import MalformedNotificationError
from app.infrastructure.exceptions import QueuePublishError
from app.shared.utils.retry import RetryPolicy, retry_async

logger = logging.getLogger(__name__)


def create_sqs_client(settings: Settings) -> Any:
    """boto3 SQS client; credentials fall back to env/IAM when not set."""
    extra = {} if settings.sqs_endpoint_url is None else {"endpoint_url": settings.sqs_endpoint_url}
    secret = settings.aws_secret_access_key.get_secret_value() if settings.aws_secret_access_key else None
    return boto3.client(
        "sqs",
        region_name=settings.aws_region,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=secret,
        **extra,
    )


class SqsIndexQueue:
    """Sends change notifications to the indexing queue with retry."""

    def __init__(
        self,
        client: Any,
        queue_url: str,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._client = client
        self.queue_url = queue_url
        self.retry_policy = retry_policy or RetryPolicy()

    async def send_index_message(self, notification: ChangeNotification) -> str | None:
        """Publish one notification.

        Returns:
            The SQS MessageId, or None when no queue is configured.

        Raises:
            QueuePublishError: Send still failing after retries.
        """
        if not self.queue_url:
            logger.warning(
                "SQS queue URL not configured, skipping index message for %s",
                notification.index_key,
            )
            return None

        def _send() -> dict[str, Any]:
            try:
                return self._client.send_message(
                    QueueUrl=self.queue_url,
                    MessageBody=notification.to_json(),
                    MessageAttributes={
                        "EntityType": {
                            "DataType": "String",
                            "StringValue": notification.entity_type.value,
                        },
                        "EventType": {
                            "DataType": "String",
                            "StringValue": notification.message_type,
                        },
                    },
                )
            except (ClientError, BotoCoreError) as e:
                raise QueuePublishError(str(e), self.queue_url) from e

        async def _send_async() -> dict[str, Any]:
            return await asyncio.to_thread(_send)

        response = await retry_async(
            _send_async,
            self.retry_policy,
            retry_on=(QueuePublishError,),
            operation_name=f"queue send {notification.index_key}",
        )
        message_id = response.get("MessageId")
        logger.debug("Queued %s as %s", notification.message_type, message_id)
        return message_id


class SqsIndexWorker:
    """Long-polls the indexing queue and feeds batches to the consumer.

    A message is deleted only after its notification is acknowledged;
    failed ones become visible again after the visibility timeout.
    Malformed bodies can never succeed and are logged then deleted.
    """

    def __init__(
        self,
        client: Any,
        queue_url: str,
        consumer: SyncService,
        *,
        batch_size: int = 10,
        wait_time_seconds: int = 20,
        visibility_timeout: int = 60,
        error_backoff_seconds: float = 5.0,
    ) -> None:
        self._client = client
        self.queue_url = queue_url
        self.consumer = consumer
        self.batch_size = batch_size
        self.wait_time_seconds = wait_time_seconds
        self.visibility_timeout = visibility_timeout
        self.error_backoff_seconds = error_backoff_seconds
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @classmethod
    def from_settings(cls, settings: Settings, consumer: SyncService, client: Any = None) -> SqsIndexWorker:
        return cls(
            client or create_sqs_client(settings),
            settings.sqs_queue_url,
            consumer,
            batch_size=settings.sqs_batch_size,
            wait_time_seconds=settings.sqs_wait_time_seconds,
            visibility_timeout=settings.sqs_visibility_timeout_seconds,
        )

    def start(self) -> None:
        if self._task is None:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run(), name="sqs-index-worker")
            logger.info("SQS index worker started: %s", self.queue_url)

    async def stop(self) -> None:
        self._stopping.set()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("SQS index worker stopped")

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.poll_once()
            except (ClientError, BotoCoreError):
                logger.exception("SQS receive failed; retrying in %ss", self.error_backoff_seconds)
                await asyncio.sleep(self.error_backoff_seconds)
            except Exception:
                logger.exception("SQS worker batch failed; retrying in %ss", self.error_backoff_seconds)
                await asyncio.sleep(self.error_backoff_seconds)

    async def poll_once(self) -> int:
        """Receive one batch, process it, delete what was acknowledged.

        Returns:
            Number of messages deleted.
        """

        def _receive() -> dict[str, Any]:
            return self._client.receive_message(
                QueueUrl=self.queue_url,
                MaxNumberOfMessages=self.batch_size,
                WaitTimeSeconds=self.wait_time_seconds,
                VisibilityTimeout=self.visibility_timeout,
                MessageAttributeNames=["All"],
            )

        response = await asyncio.to_thread(_receive)
        messages = response.get("Messages", [])
        if not messages:
            return 0

        to_delete: list[str] = []
        parsed: list[tuple[str, ChangeNotification]] = []
        for message in messages:
            try:
                parsed.append((message["ReceiptHandle"], ChangeNotification.from_json(message["Body"])))
            except MalformedNotificationError as e:
                logger.error(
                    "Dropping malformed queue message %s: %s",
                    message.get("MessageId"),
                    e.details,
                )
                to_delete.append(message["ReceiptHandle"])

        result = await self.consumer.process_batch(n for _, n in parsed)
        failed = {n for n, _ in result.failures}
        retained = 0
        for handle, notification in parsed:
            if notification in failed:
                retained += 1
            else:
                to_delete.append(handle)
        if retained:
            logger.warning("%d message(s) left on queue for redelivery", retained)

        await self._delete(to_delete)
        return len(to_delete)

    async def _delete(self, receipt_handles: list[str]) -> None:
        if not receipt_handles:
            return
        entries = [{"Id": str(i), "ReceiptHandle": h} for i, h in enumerate(receipt_handles)]

        def _delete_batch() -> dict[str, Any]:
            return self._client.delete_message_batch(QueueUrl=self.queue_url, Entries=entries)

        response = await asyncio.to_thread(_delete_batch)
        for failure in response.get("Failed", []):
            logger.warning("Failed to delete queue message %s: %s", failure.get("Id"), failure.get("Message"))
