"""
Autocomplete suggestions.

Responsibilities:
- Collect short candidate lists per facet dimension (venue names, item
  names, category labels, region labels) for a partial query.
- Score them with the relevance heuristics, de-duplicate by (text, type)
  and return the best few.
- Fall back to caller-supplied recent searches for an empty query.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Sequence

from ..catalog.store import EntityStore
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .errors import RetrievalFailure
from .models import (
    EntityKind,
    ItemEntity,
    Suggestion,
    SuggestionResponse,
    SuggestionType,
    VenueEntity,
    category_label,
    region_label,
)
from .relevance import normalize_query, score_field
from .retrieval import gather_by_kind

logger = logging.getLogger(__name__)

_STEP = "suggest"


def remember_search(recent: Sequence[str], query: str, limit: int = 5) -> list[str]:
    """Return *recent* with *query* moved to the front, de-duplicated and capped."""
    trimmed = query.strip()
    if not trimmed:
        return list(recent)[:limit]
    return [trimmed, *(s for s in recent if s != trimmed)][:limit]


def recent_suggestions(recent: Iterable[str], limit: int = 10) -> list[Suggestion]:
    """Turn recent searches into suggestions without scoring them."""
    out: list[Suggestion] = []
    seen: set[str] = set()
    for text in recent:
        text = text.strip()
        if not text or text.casefold() in seen:
            continue
        seen.add(text.casefold())
        out.append(Suggestion(text=text, type=SuggestionType.recent))
        if len(out) >= limit:
            break
    return out


def _facet_values(
    venues: Iterable[VenueEntity], items: Iterable[ItemEntity]
) -> dict[SuggestionType, list[str]]:
    values: dict[SuggestionType, list[str]] = defaultdict(list)
    for venue in venues:
        values[SuggestionType.venue].append(venue.name)
        values[SuggestionType.category].append(category_label(venue) or "")
    for item in items:
        values[SuggestionType.item].append(item.name)
        values[SuggestionType.category].append(category_label(item) or "")
        values[SuggestionType.region].append(region_label(item) or "")
    return values


def rank_suggestions(
    term: str,
    values: dict[SuggestionType, list[str]],
    per_facet: int = 5,
    limit: int = 10,
) -> list[Suggestion]:
    """Score, cap per facet, de-duplicate by (text, type) and order by score."""
    merged: dict[tuple[str, SuggestionType], Suggestion] = {}
    for kind in (SuggestionType.venue, SuggestionType.item, SuggestionType.category, SuggestionType.region):
        facet: dict[str, Suggestion] = {}
        for text in values.get(kind, []):
            text = text.strip()
            score = score_field(term, text)
            if score <= 0:
                continue
            key = text.casefold()
            existing = facet.get(key)
            if existing is None or score > existing.score:
                count = existing.count + 1 if existing else 1
                facet[key] = Suggestion(text=text, type=kind, count=count, score=score)
            else:
                facet[key] = existing.model_copy(update={"count": existing.count + 1})

        top = sorted(facet.values(), key=lambda s: (-s.score, s.text.casefold(), s.text))[:per_facet]
        for suggestion in top:
            merged[(suggestion.text.casefold(), kind)] = suggestion

    ordered = sorted(
        merged.values(),
        key=lambda s: (-s.score, s.text.casefold(), s.type.value),
    )
    return ordered[:limit]


class SuggestionIndex:
    """Produces ranked, de-duplicated autocomplete suggestions."""

    def __init__(self, store: EntityStore, config: SearchConfig = DEFAULT_SEARCH_CONFIG) -> None:
        self._store = store
        self._config = config

    async def suggest(
        self, partial_query: str, recent_searches: Sequence[str] = ()
    ) -> SuggestionResponse:
        term = normalize_query(partial_query)
        if not term:
            return SuggestionResponse(
                query=partial_query,
                suggestions=recent_suggestions(recent_searches, self._config.suggestion_limit),
                from_recent=True,
            )

        try:
            venues, items = await self._gather(term)
        except RetrievalFailure as exc:
            logger.warning("Suggestion retrieval failed for %r", partial_query, exc_info=True)
            return SuggestionResponse(query=partial_query, success=False, error=exc.to_info())

        suggestions = rank_suggestions(
            term,
            _facet_values(venues, items),
            per_facet=self._config.suggestions_per_facet,
            limit=self._config.suggestion_limit,
        )
        return SuggestionResponse(query=partial_query, suggestions=suggestions)

    async def _gather(self, term: str) -> tuple[list[VenueEntity], list[ItemEntity]]:
        batches = await gather_by_kind(
            {kind: self._store.find_by_text(term, kind) for kind in (EntityKind.venue, EntityKind.item)},
            _STEP,
            self._config.retrieval_timeout,
        )
        venues = [e for e in batches[EntityKind.venue] if isinstance(e, VenueEntity)]
        items = [e for e in batches[EntityKind.item] if isinstance(e, ItemEntity)]
        return venues, items
