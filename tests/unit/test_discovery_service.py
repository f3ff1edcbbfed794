"""DiscoveryService: cache-aside search and featured reads."""

from datetime import datetime, timezone

import pytest

from app.application.dtos.search import SearchFilters
from app.application.services.search_document_builder import build_episode_document, build_show_document
from app.application.use_cases.discovery import DiscoveryService, coerce_filters
from app.domain.entities.change_notification import ChangeNotification
from app.domain.enums import ChangeOperation, EntityType
from app.domain.exceptions import ExternalServiceError, ValidationException
from app.infrastructure.exceptions import CacheUnavailableError
from tests.fakes import FakeCache, FakeSearchIndex, make_episode, make_show


@pytest.fixture
async def seeded_index(search_index: FakeSearchIndex) -> FakeSearchIndex:
    show = make_show()
    await search_index.upsert(build_show_document(show))
    await search_index.upsert(build_episode_document(make_episode("e1", show=show, duration=300)))
    await search_index.upsert(build_episode_document(make_episode("e2", show=show, duration=3600)))
    return search_index


async def test_search_miss_populates_cache(discovery_service, seeded_index, cache) -> None:
    results = await discovery_service.search("tech", {"category": "tech"})
    assert [r["id"] for r in results] == ["s1"]
    assert cache.store["search:tech:category:tech"] == results
    assert cache.ttls["search:tech:category:tech"] == 300


async def test_search_hit_skips_index(discovery_service, seeded_index, cache) -> None:
    cache.store["search:tech:"] = [{"id": "cached"}]
    results = await discovery_service.search("tech")
    assert results == [{"id": "cached"}]
    assert seeded_index.search_calls == []


async def test_search_query_is_normalized_before_lookup(discovery_service, seeded_index, cache) -> None:
    await discovery_service.search("  tech ")
    await discovery_service.search("tech")
    assert len(seeded_index.search_calls) == 1
    assert seeded_index.search_calls[0][0] == "tech"


async def test_filter_order_does_not_change_key(discovery_service, seeded_index) -> None:
    await discovery_service.search("", {"language": "en", "category": "tech"})
    await discovery_service.search("", {"category": "tech", "language": "en"})
    assert len(seeded_index.search_calls) == 1


async def test_duration_range_filters_episodes(discovery_service, seeded_index) -> None:
    results = await discovery_service.search("", SearchFilters(min_duration=0, max_duration=600))
    assert [r["id"] for r in results] == ["e1"]


async def test_cache_down_falls_through_to_index(discovery_service, seeded_index, cache) -> None:
    cache.down = True
    results = await discovery_service.search("tech")
    assert [r["id"] for r in results] == ["s1"]
    assert cache.store == {}


async def test_cache_errors_are_not_fatal(seeded_index) -> None:
    cache = FakeCache()

    async def broken(*_args, **_kwargs):
        raise CacheUnavailableError("get", "boom")

    cache.get = broken
    cache.set = broken
    service = DiscoveryService(seeded_index, cache)
    results = await service.search("tech")
    assert [r["id"] for r in results] == ["s1"]


async def test_no_cache_configured(seeded_index) -> None:
    service = DiscoveryService(seeded_index, None)
    assert await service.featured(1)


async def test_index_failure_propagates(discovery_service, seeded_index) -> None:
    seeded_index.fail_reads = True
    with pytest.raises(ExternalServiceError):
        await discovery_service.search("tech")


async def test_featured_newest_first_and_cached(search_index, cache) -> None:
    old = make_show("old", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    new = make_show("new", created_at=datetime(2025, 6, 1, tzinfo=timezone.utc))
    await search_index.upsert(build_show_document(old))
    await search_index.upsert(build_show_document(new))
    service = DiscoveryService(search_index, cache, featured_ttl=600)

    results = await service.featured(1)
    assert [r["id"] for r in results] == ["new"]
    assert cache.ttls["featured:1"] == 600

    await service.featured(1)
    assert search_index.featured_calls == [1]


async def test_featured_default_limit(discovery_service, seeded_index, cache) -> None:
    await discovery_service.featured()
    assert seeded_index.featured_calls == [10]
    assert "featured:10" in cache.store


async def test_featured_rejects_non_positive_limit(discovery_service) -> None:
    with pytest.raises(ValidationException):
        await discovery_service.featured(0)


def test_coerce_filters_accepts_camel_and_snake_keys() -> None:
    assert coerce_filters({"minDuration": "60", "max_duration": 120, "category": None}) == SearchFilters(
        min_duration=60, max_duration=120
    )


@pytest.mark.parametrize("filters", [{"genre": "x"}, {"minDuration": "long"}])
def test_coerce_filters_rejects_bad_input(filters) -> None:
    with pytest.raises(ValidationException):
        coerce_filters(filters)


async def test_featured_three_of_five_newest_first(search_index, cache) -> None:
    for day in range(5):
        show = make_show(f"s{day}", created_at=datetime(2025, 3, day + 1, tzinfo=timezone.utc))
        await search_index.upsert(build_show_document(show))
    service = DiscoveryService(search_index, cache)

    results = await service.featured(3)

    assert [r["id"] for r in results] == ["s4", "s3", "s2"]


async def test_search_after_index_write_queries_index_again(
    discovery_service, sync_service, reader, search_index
) -> None:
    reader.add_show(make_show())
    await sync_service.process(ChangeNotification(EntityType.SHOW, "s1", ChangeOperation.CREATED))
    first = await discovery_service.search("tech")
    await discovery_service.search("tech")
    assert len(search_index.search_calls) == 1

    reader.add_show(make_show(title="Tech Talk Weekly"))
    await sync_service.process(ChangeNotification(EntityType.SHOW, "s1", ChangeOperation.UPDATED))
    second = await discovery_service.search("tech")

    assert len(search_index.search_calls) == 2
    assert first[0]["title"] == "Tech Talk"
    assert second[0]["title"] == "Tech Talk Weekly"
