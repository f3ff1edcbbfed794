"""ChangeListener: pg_notify payloads into the indexing consumer."""

import asyncio
import json
from unittest.mock import AsyncMock

import asyncpg

from app.domain.entities.change_notification import ChangeNotification
from app.domain.enums import ChangeOperation, EntityType
from app.infrastructure.messaging.pg_listener import ChangeListener
from tests.fakes import make_show


def _payload(operation: str, entity_id: str) -> str:
    return json.dumps({"operation": operation, "id": entity_id})


async def test_show_channel_indexes_show(sync_service, reader, search_index) -> None:
    reader.add_show(make_show())
    listener = ChangeListener("postgresql://test", sync_service)
    assert await listener.handle("show_changes", _payload("INSERT", "s1")) is True
    assert "show_s1" in search_index.documents


async def test_episode_channel_delete(sync_service, search_index) -> None:
    search_index.documents["episode_e1"] = {"id": "e1"}
    listener = ChangeListener("postgresql://test", sync_service)
    assert await listener.handle("episode_changes", _payload("DELETE", "e1")) is True
    assert "episode_e1" not in search_index.documents


async def test_entity_type_comes_from_channel() -> None:
    consumer = AsyncMock()
    listener = ChangeListener("postgresql://test", consumer)
    await listener.handle("episode_changes", _payload("UPDATE", "x1"))
    consumer.process.assert_awaited_once_with(
        ChangeNotification(EntityType.EPISODE, "x1", ChangeOperation.UPDATED)
    )


async def test_unknown_channel_is_ignored() -> None:
    consumer = AsyncMock()
    listener = ChangeListener("postgresql://test", consumer)
    assert await listener.handle("other_changes", _payload("INSERT", "a")) is False
    consumer.process.assert_not_awaited()


async def test_malformed_payload_is_dropped() -> None:
    consumer = AsyncMock()
    listener = ChangeListener("postgresql://test", consumer)
    assert await listener.handle("show_changes", "not json") is False
    consumer.process.assert_not_awaited()


async def test_consumer_failure_is_logged_not_raised() -> None:
    consumer = AsyncMock()
    consumer.process.side_effect = RuntimeError("index down")
    listener = ChangeListener("postgresql://test", consumer)
    assert await listener.handle("show_changes", _payload("UPDATE", "s1")) is False


async def test_listen_subscribes_to_each_channel_and_closes() -> None:
    conn = AsyncMock()
    conn.is_closed = lambda: False
    callbacks = []
    conn.add_termination_listener = lambda cb: callbacks.append(cb)

    async def add_listener(channel, callback):
        if channel == "episode_changes":
            callbacks[0](conn)

    conn.add_listener.side_effect = add_listener
    connect = AsyncMock(return_value=conn)
    listener = ChangeListener("postgresql://test", AsyncMock(), connect=connect)

    await listener._listen()

    connect.assert_awaited_once_with("postgresql://test")
    assert [c.args[0] for c in conn.add_listener.await_args_list] == ["show_changes", "episode_changes"]
    conn.close.assert_awaited_once()


async def test_run_keeps_reconnecting_after_interface_error() -> None:
    connect = AsyncMock(side_effect=asyncpg.InterfaceError("connection was closed in the middle of operation"))
    listener = ChangeListener("postgresql://test", AsyncMock(), reconnect_delay=0.01, connect=connect)

    listener.start()
    await asyncio.sleep(0.1)
    task = listener._task

    assert task is not None and not task.done()
    assert connect.await_count >= 2
    await listener.stop()
    assert listener._task is None
