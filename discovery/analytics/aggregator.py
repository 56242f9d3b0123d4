from __future__ import annotations

from collections import Counter
from typing import Any

import numpy as np

from .store import SEARCH_EVENT, SUGGEST_EVENT

FILTER_NAMES = [
    "cuisine",
    "open_only",
    "max_distance_km",
    "max_price",
    "spice_level",
    "vegetarian_only",
    "vegan_only",
    "category",
    "origin",
    "max_calories",
    "min_rating",
    "available_only",
    "kind",
    "sort_by",
]


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == SEARCH_EVENT]
    suggests = [e for e in events if e["type"] == SUGGEST_EVENT]
    total = len(searches)

    # Response times
    times = np.array(
        [s["response_time_ms"] for s in searches if "response_time_ms" in s],
        dtype=float,
    )
    avg_time = round(float(times.mean()), 1) if times.size else 0.0
    p95_time = round(float(np.percentile(times, 95)), 1) if times.size else 0.0

    # Outcomes
    failures = sum(1 for s in searches if not s.get("success", True))
    zero_results = sum(
        1 for s in searches if s.get("success", True) and s.get("results_count", 0) == 0
    )

    # Top queries
    query_counter: Counter[str] = Counter()
    for s in searches:
        query = (s.get("query") or "").strip().casefold()
        if query:
            query_counter[query] += 1
    top_queries = [{"query": q, "count": c} for q, c in query_counter.most_common(10)]

    # Filter usage rates
    filter_counts = {name: 0 for name in FILTER_NAMES}
    for s in searches:
        for name in s.get("filters", []) or []:
            if name in filter_counts:
                filter_counts[name] += 1
    filter_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in filter_counts.items()
    }

    return {
        "total_searches": total,
        "failed_searches": failures,
        "zero_result_rate": round(zero_results / total * 100, 1) if total else 0.0,
        "avg_response_time_ms": avg_time,
        "p95_response_time_ms": p95_time,
        "top_queries": top_queries,
        "filter_usage": filter_usage,
        "suggestion_requests": len(suggests),
    }
