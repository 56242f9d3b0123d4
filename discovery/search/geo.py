"""
Geographic distance helpers.

Responsibilities:
- Great-circle distance between two coordinates (haversine, spherical Earth).
- Radius filtering that annotates each survivor with its distance.
- Human-readable distance and coarse travel-time labels.

Nothing here raises on bad data: NaN coordinates propagate as NaN distances
and render as "unknown".
"""
from __future__ import annotations

import math
from typing import Any, Iterable, TypeVar

from .models import Coordinate

EARTH_RADIUS_KM = 6371.0

# Average speeds in km/h. Tunable policy, not routing data.
TRAVEL_SPEEDS_KMH: dict[str, float] = {
    "walking": 5.0,
    "driving": 30.0,
}

UNKNOWN_LABEL = "unknown"

T = TypeVar("T")


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Compute haversine distance in km."""
    dlat = math.radians(b.latitude - a.latitude)
    dlon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def within_radius(
    candidates: Iterable[T],
    center: Coordinate,
    radius_km: float,
) -> list[tuple[T, float]]:
    """
    Keep candidates whose coordinate lies within *radius_km* of *center*.

    Returns ``(candidate, distance_km)`` pairs in input order. Candidates
    without a ``coordinate`` attribute are skipped.
    """
    kept: list[tuple[T, float]] = []
    for candidate in candidates:
        coord: Any = getattr(candidate, "coordinate", None)
        if coord is None:
            continue
        dist = distance_km(center, coord)
        # NaN compares False, so invalid coordinates drop out here
        if dist <= radius_km:
            kept.append((candidate, dist))
    return kept


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_distance(km: float) -> str:
    """Render a distance for display: meters below 1 km, then km."""
    if not math.isfinite(km):
        return UNKNOWN_LABEL
    if km < 1:
        return f"{_round_half_up(km * 1000)}m"
    if km < 10:
        return f"{km:.1f}km"
    return f"{_round_half_up(km)}km"


def estimate_travel_time(km: float, mode: str = "driving") -> str:
    """
    Coarse travel time from an assumed average speed per *mode*.

    Unknown modes use the driving speed. Illustrative only; not an ETA.
    """
    speed = TRAVEL_SPEEDS_KMH.get(mode, TRAVEL_SPEEDS_KMH["driving"])

    if not math.isfinite(km):
        return UNKNOWN_LABEL

    minutes = _round_half_up(km / speed * 60)
    if minutes < 1:
        return "< 1 min"
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m" if rest else f"{hours}h"
