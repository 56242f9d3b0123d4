from __future__ import annotations

from decimal import Decimal

import pytest

from discovery.search import filters
from discovery.search.models import Coordinate, CuisineCategory, EntityKind, FilterSpec

ORIGIN = Coordinate(latitude=0.0, longitude=0.0)


def _ids(entities):
    return [e.id for e in entities]


def test_no_spec_keeps_everything(venues, items):
    assert _ids(filters.apply([*venues, *items], None)) == ["v1", "v2", "v3", "i1", "i2", "i3"]


def test_min_rating_keeps_venues_at_or_above(make_venue):
    candidates = [
        make_venue("a", "A", rating=4.8),
        make_venue("b", "B", rating=4.2),
        make_venue("c", "C", rating=4.9),
    ]
    assert _ids(filters.apply(candidates, FilterSpec(min_rating=4.5))) == ["a", "c"]


def test_adding_a_facet_never_grows_the_result(venues, items):
    candidates = [*venues, *items]
    loose = FilterSpec(min_rating=4.0)
    tighter = loose.model_copy(update={"available_only": True, "vegetarian_only": True})
    tightest = tighter.model_copy(update={"max_price": Decimal("3.00")})

    a = set(_ids(filters.apply(candidates, loose)))
    b = set(_ids(filters.apply(candidates, tighter)))
    c = set(_ids(filters.apply(candidates, tightest)))
    assert c <= b <= a


def test_item_facets_do_not_reject_venues(venues, items):
    spec = FilterSpec(vegetarian_only=True)
    assert _ids(filters.apply([*venues, *items], spec)) == ["v1", "v2", "v3", "i2"]


def test_venue_facets_do_not_reject_items(venues, items):
    spec = FilterSpec(cuisine=CuisineCategory.east_african, open_only=True)
    assert _ids(filters.apply([*venues, *items], spec)) == ["v2", "i1", "i2", "i3"]


def test_kind_restricts_entities(venues, items):
    spec = FilterSpec(kind=EntityKind.item, category="main course")
    assert _ids(filters.apply([*venues, *items], spec)) == ["i1", "i3"]


def test_conflicting_facets_match_nothing(venues, items):
    spec = FilterSpec(kind=EntityKind.venue, max_price=Decimal("5"))
    assert filters.has_conflicting_facets(spec)
    assert filters.apply([*venues, *items], spec) == []


def test_false_flags_are_not_conflicts():
    assert not filters.has_conflicting_facets(FilterSpec(kind=EntityKind.venue, vegan_only=False))


def test_spice_level_is_exact(items):
    assert _ids(filters.apply(items, FilterSpec(spice_level=4))) == ["i3"]


def test_max_calories_rejects_unknown(items):
    assert _ids(filters.apply(items, FilterSpec(max_calories=500))) == ["i1", "i2"]


def test_origin_is_case_insensitive(items):
    assert _ids(filters.apply(items, FilterSpec(origin=" ethiopia "))) == ["i2", "i3"]


def test_distance_filter_needs_a_location(make_venue):
    near = make_venue("near", "Near", coordinate=Coordinate(latitude=0, longitude=0))
    far = make_venue("far", "Far", coordinate=Coordinate(latitude=0, longitude=1))
    spec = FilterSpec(max_distance_km=50)

    assert _ids(filters.apply([near, far], spec, ORIGIN)) == ["near"]
    assert _ids(filters.apply([near, far], spec)) == ["near", "far"]
    assert _ids(filters.apply([near, far], FilterSpec(max_distance_km=200), ORIGIN)) == ["near", "far"]


def test_distance_filter_passes_items_through(make_venue, make_item):
    far = make_venue("far", "Far", coordinate=Coordinate(latitude=0, longitude=1))
    dish = make_item("dish", "Dish")
    assert _ids(filters.apply([far, dish], FilterSpec(max_distance_km=1), ORIGIN)) == ["dish"]


@pytest.mark.parametrize(
    "facet",
    [
        {"spice_level": 0},
        {"max_price": Decimal("0")},
        {"max_calories": 0},
    ],
)
def test_zero_valued_item_facets_conflict_with_venue_kind(venues, items, facet):
    spec = FilterSpec(kind=EntityKind.venue, **facet)
    assert filters.has_conflicting_facets(spec)
    assert filters.apply([*venues, *items], spec) == []


def test_populated_facets_skips_false_flags_but_keeps_zero_bounds():
    spec = FilterSpec(vegan_only=False, open_only=True, spice_level=0, max_price=Decimal("0"))
    assert sorted(filters.populated_facets(spec)) == ["max_price", "open_only", "spice_level"]
