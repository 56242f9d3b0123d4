"""
Search ranking pipeline.

Responsibilities:
- Validate caller input before touching the entity store.
- Retrieve candidates for each entity kind concurrently under one timeout.
- Re-apply every facet locally (the store is not trusted for exact semantics).
- Score relevance, annotate distance, sort deterministically and paginate.
- Turn store failures into explicit failure responses.
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Iterable

from ..catalog.store import EntityStore
from . import filters as facet_filters
from . import geo
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .errors import MalformedInput, RetrievalFailure
from .models import (
    Coordinate,
    EntityKind,
    FilterSpec,
    ItemEntity,
    ScoredResult,
    SearchResponse,
    SortKey,
    SortOrder,
    VenueEntity,
)
from .relevance import normalize_query, score_entity
from .retrieval import gather_by_kind

logger = logging.getLogger(__name__)

TEXT_STEP = "find_by_text"
FACET_STEP = "find_by_facet"

_NATURAL_DESCENDING = {SortKey.relevance, SortKey.rating}


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def _default_key(result: ScoredResult) -> tuple:
    entity = result.entity
    return (
        -result.relevance,
        -entity.rating,
        entity.name.casefold(),
        entity.name,
        entity.kind,
        entity.id,
    )


def _sort_value(result: ScoredResult, key: SortKey) -> Any:
    entity = result.entity
    if key is SortKey.relevance:
        return result.relevance
    if key is SortKey.rating:
        return entity.rating
    if key is SortKey.name:
        return entity.name.casefold()
    if key is SortKey.price:
        return entity.price if isinstance(entity, ItemEntity) else None
    if result.distance_km is None or math.isnan(result.distance_km):
        return None
    return result.distance_km


def sort_results(results: Iterable[ScoredResult], spec: FilterSpec | None = None) -> list[ScoredResult]:
    """
    Order results deterministically.

    Default: relevance desc, rating desc, name asc, then kind and id. An
    explicit ``sort_by`` becomes the primary key; results lacking that key
    go last and ties keep the default order.
    """
    ordered = sorted(results, key=_default_key)
    sort_by = spec.sort_by if spec else None
    if sort_by is None:
        return ordered

    if spec.sort_order is None:
        descending = sort_by in _NATURAL_DESCENDING
    else:
        descending = spec.sort_order is SortOrder.desc

    present: list[ScoredResult] = []
    missing: list[ScoredResult] = []
    for result in ordered:
        (missing if _sort_value(result, sort_by) is None else present).append(result)
    # list.sort is stable with reverse=True as well
    present.sort(key=lambda r: _sort_value(r, sort_by), reverse=descending)
    return present + missing


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class RankingPipeline:
    """Stateless search orchestration over an EntityStore."""

    def __init__(self, store: EntityStore, config: SearchConfig = DEFAULT_SEARCH_CONFIG) -> None:
        self._store = store
        self._config = config

    async def search(
        self,
        query: str,
        filters: FilterSpec | None = None,
        location: Coordinate | None = None,
        page_limit: int | None = None,
        offset: int = 0,
    ) -> SearchResponse:
        """
        Run one search and return an ordered page.

        Raises MalformedInput for bad caller input. Store failures and
        timeouts are reported in the response, never raised.
        """
        limit = self._validate(location, page_limit, offset)
        term = normalize_query(query)

        if facet_filters.has_conflicting_facets(filters):
            return SearchResponse(query=query, offset=offset, limit=limit)

        try:
            candidates = await self._retrieve(term, filters)
        except RetrievalFailure as exc:
            logger.warning("Search retrieval failed for query %r", query, exc_info=True)
            return SearchResponse(
                query=query,
                offset=offset,
                limit=limit,
                success=False,
                error=exc.to_info(),
            )

        survivors = facet_filters.apply(candidates, filters, location)
        scored = [self._annotate(term, entity, location) for entity in survivors]
        if term:
            scored = [r for r in scored if r.relevance > 0]

        ordered = sort_results(scored, filters)
        return SearchResponse(
            query=query,
            results=ordered[offset : offset + limit],
            total_matches=len(ordered),
            offset=offset,
            limit=limit,
        )

    async def search_nearby(
        self,
        location: Coordinate,
        filters: FilterSpec | None = None,
        radius_km: float | None = None,
        page_limit: int | None = None,
        offset: int = 0,
    ) -> SearchResponse:
        """Browse venues around *location*, closest first unless a sort is given."""
        spec = filters or FilterSpec()
        if radius_km is None:
            radius_km = spec.max_distance_km
        if radius_km is None:
            radius_km = self._config.nearby_radius_km
        update: dict[str, Any] = {"kind": EntityKind.venue, "max_distance_km": radius_km}
        if spec.sort_by is None:
            update["sort_by"] = SortKey.distance
        return await self.search(
            "",
            filters=spec.model_copy(update=update),
            location=location,
            page_limit=page_limit,
            offset=offset,
        )

    # ── Private helpers ───────────────────────────────────────────────

    def _validate(self, location: Coordinate | None, page_limit: int | None, offset: int) -> int:
        if location is not None and not (
            math.isfinite(location.latitude) and math.isfinite(location.longitude)
        ):
            raise MalformedInput(f"Searcher location must be finite, got {location!r}")
        if page_limit is not None and page_limit < 0:
            raise MalformedInput(f"Page limit must not be negative, got {page_limit}")
        if offset < 0:
            raise MalformedInput(f"Offset must not be negative, got {offset}")
        if page_limit is None:
            return self._config.default_page_limit
        return min(page_limit, self._config.max_page_limit)

    @staticmethod
    def _kinds(filters: FilterSpec | None) -> list[EntityKind]:
        if filters is not None and filters.kind is not None:
            return [filters.kind]
        return [EntityKind.venue, EntityKind.item]

    async def _retrieve(
        self, term: str, filters: FilterSpec | None
    ) -> list[VenueEntity | ItemEntity]:
        if term:
            step = TEXT_STEP
            calls = {kind: self._store.find_by_text(term, kind) for kind in self._kinds(filters)}
        else:
            step = FACET_STEP
            calls = {kind: self._store.find_by_facet(filters, kind) for kind in self._kinds(filters)}
        batches = await gather_by_kind(calls, step, self._config.retrieval_timeout)

        merged: list[VenueEntity | ItemEntity] = []
        seen: set[tuple[str, str]] = set()
        for batch in batches.values():
            for entity in batch:
                key = (entity.kind, entity.id)
                if key not in seen:
                    seen.add(key)
                    merged.append(entity)
        return merged

    def _annotate(
        self, term: str, entity: VenueEntity | ItemEntity, location: Coordinate | None
    ) -> ScoredResult:
        result = ScoredResult(entity=entity, relevance=score_entity(term, entity) if term else 0)
        coordinate = getattr(entity, "coordinate", None)
        if location is None or coordinate is None:
            return result
        dist = geo.distance_km(location, coordinate)
        result.distance_km = dist
        result.distance_label = geo.format_distance(dist)
        result.travel_time = geo.estimate_travel_time(dist, self._config.travel_mode)
        return result


# ---------------------------------------------------------------------------
# Latest-query-wins coordination
# ---------------------------------------------------------------------------


class LatestSearch:
    """
    Runs searches for one searcher so that only the newest one delivers.

    Submitting a new search cancels a previous one that is still in flight;
    the superseded call returns ``None`` instead of a stale response.
    """

    def __init__(self, pipeline: RankingPipeline) -> None:
        self._pipeline = pipeline
        self._current: asyncio.Task[SearchResponse] | None = None

    async def submit(self, query: str, **kwargs: Any) -> SearchResponse | None:
        previous = self._current
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(self._pipeline.search(query, **kwargs))
        self._current = task
        try:
            response = await task
        except asyncio.CancelledError:
            me = asyncio.current_task()
            if task is not self._current and not (me is not None and me.cancelling()):
                return None
            raise
        # A newer submission started while this one was finishing
        if task is not self._current:
            return None
        return response
