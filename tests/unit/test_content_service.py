"""ContentService: write path commits then enqueues index messages."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.content import EpisodeCreate, ShowCreate
from app.application.use_cases.content import ContentService
from app.domain.enums import ChangeOperation, EntityType
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.infrastructure.exceptions import QueuePublishError
from tests.fakes import FakeQueue, make_episode, make_show


@pytest.fixture
def repo() -> AsyncMock:
    repo = AsyncMock()
    repo.create_show = AsyncMock(return_value=make_show())
    repo.update_show = AsyncMock(return_value=make_show(category="news"))
    repo.create_episode = AsyncMock(return_value=make_episode(show=make_show()))
    repo.update_episode = AsyncMock(return_value=make_episode(show=make_show()))
    repo.episode_ids_for_show = AsyncMock(return_value=["e1", "e2"])
    return repo


@pytest.fixture
def service(repo: AsyncMock, queue: FakeQueue) -> ContentService:
    return ContentService(repo, queue)


def _sent(queue: FakeQueue) -> list[tuple[EntityType, str, ChangeOperation]]:
    return [(n.entity_type, n.entity_id, n.operation) for n in queue.sent]


async def test_create_show_commits_then_enqueues(service, repo, queue) -> None:
    show = await service.create_show(ShowCreate(title="T", category="tech", language="en"))
    assert show.id == "s1"
    repo.commit.assert_awaited_once()
    assert _sent(queue) == [(EntityType.SHOW, "s1", ChangeOperation.CREATED)]


async def test_update_show_title_only_enqueues_show(service, repo, queue) -> None:
    await service.update_show("s1", {"title": "Renamed"})
    repo.episode_ids_for_show.assert_not_awaited()
    assert _sent(queue) == [(EntityType.SHOW, "s1", ChangeOperation.UPDATED)]


async def test_update_show_facets_reindexes_episodes(service, queue) -> None:
    await service.update_show("s1", {"category": "news"})
    assert _sent(queue) == [
        (EntityType.SHOW, "s1", ChangeOperation.UPDATED),
        (EntityType.EPISODE, "e1", ChangeOperation.UPDATED),
        (EntityType.EPISODE, "e2", ChangeOperation.UPDATED),
    ]


async def test_update_show_not_found(service, repo, queue) -> None:
    repo.update_show.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.update_show("nope", {"title": "x"})
    repo.commit.assert_not_awaited()
    assert queue.sent == []


@pytest.mark.parametrize(
    "changes",
    [{}, {"id": "other"}, {"created_at": None}],
)
async def test_update_show_rejects_bad_changes(service, changes) -> None:
    with pytest.raises(ValidationException):
        await service.update_show("s1", changes)


async def test_delete_show_enqueues_cascaded_episode_deletes(service, repo, queue) -> None:
    repo.delete_show.return_value = ["e1"]
    await service.delete_show("s1")
    assert _sent(queue) == [
        (EntityType.SHOW, "s1", ChangeOperation.DELETED),
        (EntityType.EPISODE, "e1", ChangeOperation.DELETED),
    ]


async def test_delete_show_not_found(service, repo) -> None:
    repo.delete_show.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.delete_show("nope")


async def test_create_episode(service, queue) -> None:
    data = EpisodeCreate(show_id="s1", title="E", episode_number=1, duration=60, audio_url="https://a/1.mp3")
    await service.create_episode(data)
    assert _sent(queue) == [(EntityType.EPISODE, "e1", ChangeOperation.CREATED)]


async def test_create_episode_rejects_negative_duration(service, repo) -> None:
    data = EpisodeCreate(show_id="s1", title="E", episode_number=1, duration=-1, audio_url="u")
    with pytest.raises(ValidationException):
        await service.create_episode(data)
    repo.create_episode.assert_not_awaited()


async def test_update_episode_validates_numbers(service) -> None:
    with pytest.raises(ValidationException):
        await service.update_episode("e1", {"duration": "long"})


async def test_delete_episode(service, repo, queue) -> None:
    repo.delete_episode.return_value = True
    await service.delete_episode("e1")
    assert _sent(queue) == [(EntityType.EPISODE, "e1", ChangeOperation.DELETED)]


async def test_delete_episode_not_found(service, repo) -> None:
    repo.delete_episode.return_value = False
    with pytest.raises(ResourceNotFoundException):
        await service.delete_episode("nope")


async def test_enqueue_failure_propagates_after_commit(service, repo, queue) -> None:
    queue.fail = True
    with pytest.raises(QueuePublishError):
        await service.create_show(ShowCreate(title="T", category="tech", language="en"))
    repo.commit.assert_awaited_once()


async def test_get_show_not_found(service, repo) -> None:
    repo.get_show.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.get_show("nope")
