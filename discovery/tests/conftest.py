from __future__ import annotations

from decimal import Decimal

import pytest

from discovery.catalog.memory_store import InMemoryEntityStore
from discovery.search.models import Coordinate, CuisineCategory, ItemEntity, VenueEntity


def _venue(id: str, name: str, **overrides) -> VenueEntity:
    data = {
        "id": id,
        "name": name,
        "cuisine": CuisineCategory.west_african,
        "rating": 4.0,
        "coordinate": Coordinate(latitude=0.0, longitude=0.0),
    }
    data.update(overrides)
    return VenueEntity(**data)


def _item(id: str, name: str, **overrides) -> ItemEntity:
    data = {
        "id": id,
        "name": name,
        "venue_id": "v1",
        "rating": 4.0,
        "price": Decimal("10.00"),
    }
    data.update(overrides)
    return ItemEntity(**data)


@pytest.fixture
def make_venue():
    return _venue


@pytest.fixture
def make_item():
    return _item


@pytest.fixture
def venues() -> list[VenueEntity]:
    return [
        _venue(
            "v1",
            "Mama Africa Kitchen",
            description="Authentic West African cooking",
            rating=4.8,
            coordinate=Coordinate(latitude=44.9778, longitude=-93.2650),
        ),
        _venue(
            "v2",
            "Ethiopian Spice House",
            description="Traditional dishes served on injera",
            cuisine=CuisineCategory.east_african,
            rating=4.7,
            coordinate=Coordinate(latitude=44.9537, longitude=-93.2473),
        ),
        _venue(
            "v3",
            "Cape Town Grill",
            description="Braai and modern plates",
            cuisine=CuisineCategory.south_african,
            rating=4.2,
            is_open=False,
            coordinate=Coordinate(latitude=44.9481, longitude=-93.2884),
        ),
    ]


@pytest.fixture
def items() -> list[ItemEntity]:
    return [
        _item(
            "i1",
            "Jollof Rice",
            description="Rice in a rich tomato sauce",
            category="Main Course",
            origin="Nigeria",
            spice_level=2,
            price=Decimal("16.99"),
            calories=420,
            rating=4.8,
        ),
        _item(
            "i2",
            "Injera",
            venue_id="v2",
            description="Sourdough flatbread",
            category="Bread",
            origin="Ethiopia",
            is_vegetarian=True,
            is_vegan=True,
            price=Decimal("4.99"),
            calories=85,
            rating=4.5,
        ),
        _item(
            "i3",
            "Doro Wat",
            venue_id="v2",
            description="Chicken stew with berbere",
            category="Main Course",
            origin="Ethiopia",
            spice_level=4,
            price=Decimal("18.99"),
            rating=4.6,
        ),
    ]


@pytest.fixture
def store(venues, items) -> InMemoryEntityStore:
    return InMemoryEntityStore(venues=venues, items=items)
