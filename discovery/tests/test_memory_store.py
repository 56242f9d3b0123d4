from __future__ import annotations

import asyncio

import pytest

from discovery.search.errors import RetrievalFailure, RetrievalTimeout
from discovery.search.models import CuisineCategory, EntityKind, FilterSpec
from discovery.search.retrieval import guarded


def _ids(entities):
    return [e.id for e in entities]


def test_find_by_text_is_case_insensitive(store):
    assert _ids(asyncio.run(store.find_by_text("ETHIOP", EntityKind.venue))) == ["v2"]
    assert _ids(asyncio.run(store.find_by_text("ethiop", EntityKind.item))) == ["i2", "i3"]


def test_find_by_text_empty_term_returns_kind(store):
    assert _ids(asyncio.run(store.find_by_text("", EntityKind.venue))) == ["v1", "v2", "v3"]


def test_find_by_facet_pushes_down_equality(store):
    spec = FilterSpec(cuisine=CuisineCategory.south_african)
    assert _ids(asyncio.run(store.find_by_facet(spec, EntityKind.venue))) == ["v3"]
    assert _ids(asyncio.run(store.find_by_facet(spec, EntityKind.item))) == ["i1", "i2", "i3"]


def test_find_by_facet_respects_kind(store):
    spec = FilterSpec(kind=EntityKind.item)
    assert asyncio.run(store.find_by_facet(spec, EntityKind.venue)) == []


def test_guarded_maps_timeout_error():
    async def stalled():
        raise TimeoutError

    with pytest.raises(RetrievalTimeout) as info:
        asyncio.run(guarded(stalled(), EntityKind.item, "find_by_text", 2.0))
    assert str(info.value) == "Retrieval during 'find_by_text' exceeded 2s"


def test_guarded_wraps_other_errors():
    async def broken():
        raise ConnectionError("reset")

    with pytest.raises(RetrievalFailure) as info:
        asyncio.run(guarded(broken(), EntityKind.venue, "find_by_facet", 1.0))
    assert isinstance(info.value.cause, ConnectionError)
    assert info.value.entity_kind == EntityKind.venue
