"""Record to search document mapping."""

import pytest

from app.application.services.search_document_builder import (
    build_episode_document,
    build_search_document,
    build_show_document,
)
from app.domain.enums import EntityType
from app.domain.exceptions import MissingParentShowError
from tests.fakes import make_episode, make_show


def test_show_document() -> None:
    doc = build_show_document(make_show())
    assert doc.index_key == "show_s1"
    assert doc.to_source() == {
        "id": "s1",
        "entityType": "show",
        "title": "Tech Talk",
        "description": "Weekly technology news",
        "category": "tech",
        "language": "en",
        "createdAt": "2025-01-15T12:00:00+00:00",
    }


def test_missing_description_becomes_empty_string() -> None:
    doc = build_show_document(make_show(description=None))
    assert doc.description == ""


def test_episode_inherits_facets_from_show() -> None:
    show = make_show(category="comedy", language="fr")
    doc = build_episode_document(make_episode(show=show, duration=600, episode_number=4))
    assert doc.entity_type is EntityType.EPISODE
    assert doc.category == "comedy"
    assert doc.language == "fr"
    source = doc.to_source()
    assert source["showId"] == "s1"
    assert source["duration"] == 600
    assert source["episodeNumber"] == 4
    assert source["createdAt"] == "2025-01-15T12:00:00+00:00"


def test_episode_without_show_raises() -> None:
    with pytest.raises(MissingParentShowError) as exc_info:
        build_episode_document(make_episode(show=None, show_id="gone"))
    assert exc_info.value.details == {"episode_id": "e1", "show_id": "gone"}


def test_dispatch_on_record_type() -> None:
    assert build_search_document(make_show()).entity_type is EntityType.SHOW
    assert build_search_document(make_episode(show=make_show())).entity_type is EntityType.EPISODE
