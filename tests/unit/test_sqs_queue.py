"""SqsIndexQueue publishing and SqsIndexWorker batch handling with a mocked boto3 client."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from app.domain.entities.change_notification import ChangeNotification
from app.domain.enums import ChangeOperation, EntityType
from app.infrastructure.exceptions import QueuePublishError
from app.infrastructure.messaging.sqs_queue import SqsIndexQueue, SqsIndexWorker
from app.shared.utils.retry import RetryPolicy
from tests.fakes import make_episode, make_show

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123/index"


def _client_error(op: str = "SendMessage") -> ClientError:
    return ClientError({"Error": {"Code": "ServiceUnavailable", "Message": "down"}}, op)


def _message(handle: str, body: str) -> dict:
    return {"MessageId": f"m-{handle}", "ReceiptHandle": handle, "Body": body}


async def test_send_index_message_body_and_attributes() -> None:
    client = MagicMock()
    client.send_message.return_value = {"MessageId": "abc"}
    queue = SqsIndexQueue(client, QUEUE_URL)
    n = ChangeNotification(EntityType.EPISODE, "e1", ChangeOperation.UPDATED)

    assert await queue.send_index_message(n) == "abc"

    kwargs = client.send_message.call_args.kwargs
    assert kwargs["QueueUrl"] == QUEUE_URL
    assert json.loads(kwargs["MessageBody"]) == n.to_dict()
    assert kwargs["MessageAttributes"]["EntityType"]["StringValue"] == "episode"
    assert kwargs["MessageAttributes"]["EventType"]["StringValue"] == "EPISODE_UPDATED"


async def test_send_without_queue_url_is_skipped() -> None:
    client = MagicMock()
    queue = SqsIndexQueue(client, "")
    n = ChangeNotification(EntityType.SHOW, "s1", ChangeOperation.CREATED)
    assert await queue.send_index_message(n) is None
    client.send_message.assert_not_called()


async def test_send_retries_then_succeeds() -> None:
    client = MagicMock()
    client.send_message.side_effect = [_client_error(), {"MessageId": "ok"}]
    queue = SqsIndexQueue(client, QUEUE_URL, RetryPolicy(max_attempts=3, base_delay=0))
    n = ChangeNotification(EntityType.SHOW, "s1", ChangeOperation.CREATED)
    assert await queue.send_index_message(n) == "ok"
    assert client.send_message.call_count == 2


async def test_send_raises_after_retries() -> None:
    client = MagicMock()
    client.send_message.side_effect = _client_error()
    queue = SqsIndexQueue(client, QUEUE_URL, RetryPolicy(max_attempts=2, base_delay=0))
    n = ChangeNotification(EntityType.SHOW, "s1", ChangeOperation.CREATED)
    with pytest.raises(QueuePublishError):
        await queue.send_index_message(n)
    assert client.send_message.call_count == 2


@pytest.fixture
def worker_client() -> MagicMock:
    client = MagicMock()
    client.delete_message_batch.return_value = {"Successful": [], "Failed": []}
    return client


def _deleted_handles(client: MagicMock) -> list[str]:
    entries = client.delete_message_batch.call_args.kwargs["Entries"]
    return [e["ReceiptHandle"] for e in entries]


async def test_poll_once_deletes_acknowledged_and_keeps_failed(worker_client, sync_service, reader) -> None:
    show = reader.add_show(make_show())
    reader.add_episode(make_episode("e1", show=show))
    reader.add_episode(make_episode("orphan", show=None))
    ok_show = ChangeNotification(EntityType.SHOW, "s1", ChangeOperation.UPDATED)
    ok_episode = ChangeNotification(EntityType.EPISODE, "e1", ChangeOperation.CREATED)
    orphan = ChangeNotification(EntityType.EPISODE, "orphan", ChangeOperation.CREATED)
    worker_client.receive_message.return_value = {
        "Messages": [
            _message("h1", ok_show.to_json()),
            _message("h2", orphan.to_json()),
            _message("h3", ok_episode.to_json()),
        ]
    }
    worker = SqsIndexWorker(worker_client, QUEUE_URL, sync_service)

    deleted = await worker.poll_once()

    assert deleted == 2
    assert sorted(_deleted_handles(worker_client)) == ["h1", "h3"]


async def test_poll_once_drops_malformed_messages(worker_client, sync_service) -> None:
    worker_client.receive_message.return_value = {"Messages": [_message("bad", "{not json")]}
    worker = SqsIndexWorker(worker_client, QUEUE_URL, sync_service)
    assert await worker.poll_once() == 1
    assert _deleted_handles(worker_client) == ["bad"]


async def test_poll_once_empty_receive(worker_client, sync_service) -> None:
    worker_client.receive_message.return_value = {}
    worker = SqsIndexWorker(worker_client, QUEUE_URL, sync_service, batch_size=5, wait_time_seconds=0)
    assert await worker.poll_once() == 0
    worker_client.delete_message_batch.assert_not_called()
    kwargs = worker_client.receive_message.call_args.kwargs
    assert kwargs["MaxNumberOfMessages"] == 5
    assert kwargs["WaitTimeSeconds"] == 0


async def test_poll_once_all_failed_deletes_nothing(worker_client, sync_service, reader) -> None:
    reader.add_episode(make_episode("orphan", show=None))
    orphan = ChangeNotification(EntityType.EPISODE, "orphan", ChangeOperation.CREATED)
    worker_client.receive_message.return_value = {"Messages": [_message("h1", orphan.to_json())]}
    worker = SqsIndexWorker(worker_client, QUEUE_URL, sync_service)
    assert await worker.poll_once() == 0
    worker_client.delete_message_batch.assert_not_called()


async def test_worker_start_and_stop(worker_client, sync_service) -> None:
    worker_client.receive_message.return_value = {}
    worker = SqsIndexWorker(worker_client, QUEUE_URL, sync_service, wait_time_seconds=0)
    worker.start()
    await worker.stop()
    assert worker._task is None


async def test_worker_survives_unexpected_error(worker_client, sync_service) -> None:
    calls = []

    def receive(**kwargs):
        calls.append(kwargs)
        if len(calls) == 1:
            raise RuntimeError("unexpected")
        return {}

    worker_client.receive_message.side_effect = receive
    worker = SqsIndexWorker(
        worker_client, QUEUE_URL, sync_service, wait_time_seconds=0, error_backoff_seconds=0.01
    )

    worker.start()
    await asyncio.sleep(0.1)
    task = worker._task

    assert task is not None and not task.done()
    assert len(calls) >= 2
    await worker.stop()
