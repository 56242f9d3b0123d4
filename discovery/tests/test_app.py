from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from discovery.app import app, get_pipeline, get_store
from discovery.catalog.store import EntityStore, EntityStoreError
from discovery.search.errors import MalformedInput

client = TestClient(app)


class BrokenStore(EntityStore):
    async def find_by_text(self, term, kind):
        raise EntityStoreError("database unavailable")

    async def find_by_facet(self, spec, kind):
        raise EntityStoreError("database unavailable")


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata_lists_catalog_facets():
    body = client.get("/metadata").json()
    assert "West African" in body["cuisines"]
    assert "Main Course" in body["categories"]
    assert "Ethiopia" in body["regions"]


def test_search_returns_ranked_results():
    resp = client.post("/search", json={"query": "jollof"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["results"][0]["entity"]["name"] == "Jollof Rice"
    assert body["total_matches"] >= 1


def test_search_applies_filters():
    resp = client.post(
        "/search",
        json={"query": "", "filters": {"kind": "item", "vegan_only": True}},
    )
    body = resp.json()
    assert body["total_matches"] > 0
    for result in body["results"]:
        assert result["entity"]["kind"] == "item"
        assert result["entity"]["is_vegan"] is True


def test_search_with_location_annotates_venues():
    resp = client.post(
        "/search",
        json={
            "query": "",
            "filters": {"kind": "venue", "max_distance_km": 5, "sort_by": "distance"},
            "location": {"latitude": 44.9778, "longitude": -93.2650},
        },
    )
    body = resp.json()
    first = body["results"][0]
    assert first["entity"]["name"] == "Mama Africa Kitchen"
    assert first["distance_label"] == "0m"
    assert all(r["distance_km"] <= 5 for r in body["results"])


def test_search_rejects_negative_page_limit():
    resp = client.post("/search", json={"query": "rice", "page_limit": -1})
    assert resp.status_code == 422


def test_malformed_input_maps_to_422():
    pipeline = MagicMock()
    pipeline.search = AsyncMock(side_effect=MalformedInput("bad location"))
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        resp = client.post("/search", json={"query": "rice"})
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 422
    assert resp.json()["detail"] == "bad location"


def test_store_failure_maps_to_503():
    app.dependency_overrides[get_store] = BrokenStore
    try:
        resp = client.post("/search", json={"query": "rice"})
        suggest = client.get("/suggest", params={"q": "ri"})
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 503
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["kind"] == "retrieval_failure"
    assert body["error"]["retryable"] is True
    assert suggest.status_code == 503


def test_suggest_returns_matches():
    resp = client.get("/suggest", params={"q": "eth"})
    assert resp.status_code == 200
    texts = [s["text"] for s in resp.json()["suggestions"]]
    assert "Ethiopian Spice House" in texts
    assert "Ethiopia" in texts


def test_recent_searches_follow_the_session():
    with TestClient(app) as own:
        own.post("/search", json={"query": "suya"})
        own.post("/search", json={"query": "injera"})
        own.post("/search", json={"query": "   "})
        body = own.get("/suggest", params={"q": ""}).json()
    assert body["from_recent"] is True
    assert [s["text"] for s in body["suggestions"]] == ["injera", "suya"]

    fresh = TestClient(app).get("/suggest").json()
    assert fresh["suggestions"] == []
