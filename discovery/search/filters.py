"""
Facet filtering over candidate entities.

Every populated field of a FilterSpec is an independent predicate and all of
them must hold. Facets that only make sense for one entity kind are skipped
for the other kind, so a venue is never rejected for lacking an item-only
attribute.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, TypeVar

from . import geo
from .models import (
    Coordinate,
    EntityKind,
    FilterSpec,
    ItemEntity,
    VenueEntity,
)

logger = logging.getLogger(__name__)

Entity = TypeVar("Entity", VenueEntity, ItemEntity)

VENUE_ONLY_FACETS = ("cuisine", "open_only", "max_distance_km")
ITEM_ONLY_FACETS = (
    "max_price",
    "spice_level",
    "vegetarian_only",
    "vegan_only",
    "category",
    "origin",
    "max_calories",
)


def populated_facets(spec: FilterSpec, names: Iterable[str] | None = None) -> list[str]:
    """Names of the facets in *names* (default: every field) that constrain results."""
    if names is None:
        names = FilterSpec.model_fields
    # Only None and False flags ("not only vegetarian") leave a facet unset; 0 is a bound
    return [n for n in names if getattr(spec, n) is not None and getattr(spec, n) is not False]


def has_conflicting_facets(spec: FilterSpec | None) -> bool:
    """True when the filter targets one kind but constrains facets of the other."""
    if spec is None or spec.kind is None:
        return False
    if spec.kind == EntityKind.venue:
        return bool(populated_facets(spec, ITEM_ONLY_FACETS))
    return bool(populated_facets(spec, VENUE_ONLY_FACETS))


def _text_equals(a: str | None, b: str) -> bool:
    return a is not None and a.strip().casefold() == b.strip().casefold()


def _common_predicates(spec: FilterSpec) -> list[Callable[[VenueEntity | ItemEntity], bool]]:
    preds: list[Callable[[VenueEntity | ItemEntity], bool]] = []
    if spec.kind is not None:
        preds.append(lambda e: e.kind == spec.kind)
    if spec.min_rating is not None:
        preds.append(lambda e: e.rating >= spec.min_rating)
    if spec.available_only:
        preds.append(lambda e: e.is_available)
    return preds


def _venue_predicates(spec: FilterSpec) -> list[Callable[[VenueEntity], bool]]:
    preds: list[Callable[[VenueEntity], bool]] = []
    if spec.cuisine is not None:
        preds.append(lambda v: v.cuisine == spec.cuisine)
    if spec.open_only:
        preds.append(lambda v: v.is_open)
    return preds


def _item_predicates(spec: FilterSpec) -> list[Callable[[ItemEntity], bool]]:
    preds: list[Callable[[ItemEntity], bool]] = []
    if spec.max_price is not None:
        preds.append(lambda i: i.price <= spec.max_price)
    if spec.spice_level is not None:
        preds.append(lambda i: i.spice_level == spec.spice_level)
    if spec.vegetarian_only:
        preds.append(lambda i: i.is_vegetarian)
    if spec.vegan_only:
        preds.append(lambda i: i.is_vegan)
    if spec.category:
        preds.append(lambda i: _text_equals(i.category, spec.category))
    if spec.origin:
        preds.append(lambda i: _text_equals(i.origin, spec.origin))
    if spec.max_calories is not None:
        preds.append(lambda i: i.calories is not None and i.calories <= spec.max_calories)
    return preds


def apply(
    candidates: Iterable[Entity],
    spec: FilterSpec | None,
    searcher_location: Coordinate | None = None,
) -> list[Entity]:
    """Return the candidates satisfying every populated facet, in input order."""
    entities = list(candidates)
    if spec is None:
        return entities

    if has_conflicting_facets(spec):
        logger.debug("Filter targets %s but constrains facets of the other kind", spec.kind)
        return []

    common = _common_predicates(spec)
    venue_preds = _venue_predicates(spec)
    item_preds = _item_predicates(spec)

    kept: list[Entity] = []
    for entity in entities:
        if not all(p(entity) for p in common):
            continue
        kind_preds = venue_preds if isinstance(entity, VenueEntity) else item_preds
        if all(p(entity) for p in kind_preds):
            kept.append(entity)

    if spec.max_distance_km is not None and searcher_location is not None:
        venues = [e for e in kept if isinstance(e, VenueEntity)]
        in_range = {id(v) for v, _ in geo.within_radius(venues, searcher_location, spec.max_distance_km)}
        kept = [e for e in kept if not isinstance(e, VenueEntity) or id(e) in in_range]

    return kept
