"""
In-process search event log.

Responsibilities:
- Record one event per search and per suggestion request.
- Hand the events to the aggregator for the analytics endpoint.
"""
from __future__ import annotations

import time
from typing import Any, Iterable

SEARCH_EVENT = "search"
SUGGEST_EVENT = "suggest"

_events: list[dict[str, Any]] = []


def record_event(event_type: str, data: dict[str, Any]) -> None:
    _events.append({
        "type": event_type,
        "timestamp": time.time(),
        **data,
    })


def record_search(
    query: str,
    facets: Iterable[str],
    results_count: int,
    success: bool,
    response_time_ms: float,
) -> None:
    """Log a finished search; *facets* names the filters that constrained it."""
    record_event(SEARCH_EVENT, {
        "query": query,
        "filters": sorted(facets),
        "results_count": results_count,
        "success": success,
        "response_time_ms": round(response_time_ms, 2),
    })


def record_suggestion(query: str, success: bool) -> None:
    record_event(SUGGEST_EVENT, {"query": query, "success": success})


def get_events() -> list[dict[str, Any]]:
    return list(_events)


def clear_events() -> None:
    _events.clear()
