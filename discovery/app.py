from __future__ import annotations

import logging
import os
import time

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_search, record_suggestion
from .catalog.data_store import get_entity_store
from .catalog.memory_store import InMemoryEntityStore
from .catalog.store import EntityStore
from .logging_utils import setup_logging
from .search.config import DEFAULT_SEARCH_CONFIG
from .search.errors import MalformedInput
from .search.filters import populated_facets
from .search.models import SearchRequest, SearchResponse, SuggestionResponse
from .search.ranking import RankingPipeline
from .search.suggestions import SuggestionIndex, remember_search

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Discovery Search API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("DISCOVERY_SESSION_SECRET", "discovery-secret-change-in-production"),
)

_RECENT_KEY = "recent_searches"


def get_store() -> InMemoryEntityStore:
    return get_entity_store()


def get_pipeline(store: EntityStore = Depends(get_store)) -> RankingPipeline:
    return RankingPipeline(store, DEFAULT_SEARCH_CONFIG)


def get_suggestion_index(store: EntityStore = Depends(get_store)) -> SuggestionIndex:
    return SuggestionIndex(store, DEFAULT_SEARCH_CONFIG)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
async def metadata(store: InMemoryEntityStore = Depends(get_store)) -> dict:
    cuisines = {v.cuisine.value for v in store.venues}
    categories = {i.category for i in store.items if i.category}
    regions = {i.origin for i in store.items if i.origin}
    return {
        "cuisines": sorted(cuisines),
        "categories": sorted(categories),
        "regions": sorted(regions),
    }


# ── Search endpoints ─────────────────────────────────────────────────────


@app.post("/search", response_model=SearchResponse)
async def search(
    body: SearchRequest,
    request: Request,
    pipeline: RankingPipeline = Depends(get_pipeline),
):
    start = time.perf_counter()
    try:
        response = await pipeline.search(
            body.query,
            filters=body.filters,
            location=body.location,
            page_limit=body.page_limit,
            offset=body.offset,
        )
    except MalformedInput as exc:
        logger.info("Rejected search request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    elapsed_ms = (time.perf_counter() - start) * 1000

    if body.query.strip():
        request.session[_RECENT_KEY] = remember_search(
            request.session.get(_RECENT_KEY, []),
            body.query,
            DEFAULT_SEARCH_CONFIG.recent_search_limit,
        )

    record_search(
        body.query,
        populated_facets(body.filters) if body.filters else [],
        response.total_matches,
        response.success,
        elapsed_ms,
    )

    if not response.success:
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return response


@app.get("/suggest", response_model=SuggestionResponse)
async def suggest(
    request: Request,
    q: str = "",
    index: SuggestionIndex = Depends(get_suggestion_index),
):
    response = await index.suggest(q, request.session.get(_RECENT_KEY, []))
    record_suggestion(q, response.success)
    if not response.success:
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return response


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
async def analytics() -> dict:
    return compute_analytics(get_events())
