"""
CSV-backed venue and item catalog.

Rows are normalised the same way for every source: ratings and spice levels
are clamped to [0, 5], prices are made non-negative, boolean columns accept
the usual spellings and calories are optional. Rows that still fail
validation are skipped with a warning.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, TypeVar

import pandas as pd
from pydantic import ValidationError

from ..search.models import Coordinate, CuisineCategory, ItemEntity, VenueEntity
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .memory_store import InMemoryEntityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

VENUE_COLUMNS = [
    "id",
    "name",
    "description",
    "cuisine",
    "rating",
    "is_open",
    "is_available",
    "latitude",
    "longitude",
    "address",
]

ITEM_COLUMNS = [
    "id",
    "venue_id",
    "name",
    "description",
    "category",
    "origin",
    "spice_level",
    "is_vegetarian",
    "is_vegan",
    "price",
    "calories",
    "rating",
    "is_available",
]

_TRUE = {"1", "true", "yes", "y", "t"}
_FALSE = {"0", "false", "no", "n", "f", ""}

_store: InMemoryEntityStore | None = None


def _normalize_rating(rating: Any) -> float:
    raw = str(rating).strip()
    # Handle "X/5" format (e.g. "4.1/5")
    if "/" in raw:
        raw = raw.split("/")[0].strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if value != value:
        return 0.0
    return max(0.0, min(5.0, value))


def _normalize_spice(level: Any) -> int:
    return int(round(_normalize_rating(level)))


def _parse_bool(value: Any, default: bool) -> bool:
    raw = str(value).strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def _parse_price(value: Any) -> Decimal:
    raw = str(value).strip().lstrip("$")
    if not raw:
        return Decimal("0")
    try:
        price = Decimal(raw)
    except InvalidOperation as exc:
        raise ValueError(f"Not a price: {value!r}") from exc
    if not price.is_finite():
        raise ValueError(f"Not a price: {value!r}")
    return max(price, Decimal("0"))


def _parse_calories(value: Any) -> int | None:
    raw = str(value).strip()
    if not raw:
        return None
    return max(0, int(float(raw)))


def _parse_cuisine(value: Any) -> CuisineCategory:
    raw = str(value).strip().casefold()
    for cuisine in CuisineCategory:
        if cuisine.value.casefold() == raw or cuisine.name == raw.replace(" ", "_"):
            return cuisine
    raise ValueError(f"Unknown cuisine: {value!r}")


def _optional_text(value: Any) -> str | None:
    text = str(value).strip()
    return text or None


def _venue_from_row(row: dict[str, Any]) -> VenueEntity:
    return VenueEntity(
        id=str(row["id"]).strip(),
        name=str(row["name"]).strip(),
        description=str(row["description"]).strip(),
        cuisine=_parse_cuisine(row["cuisine"]),
        rating=_normalize_rating(row["rating"]),
        is_open=_parse_bool(row["is_open"], default=True),
        is_available=_parse_bool(row["is_available"], default=True),
        coordinate=Coordinate(
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
        ),
        address=str(row["address"]).strip(),
    )


def _item_from_row(row: dict[str, Any]) -> ItemEntity:
    return ItemEntity(
        id=str(row["id"]).strip(),
        venue_id=str(row["venue_id"]).strip(),
        name=str(row["name"]).strip(),
        description=str(row["description"]).strip(),
        category=_optional_text(row["category"]),
        origin=_optional_text(row["origin"]),
        spice_level=_normalize_spice(row["spice_level"]),
        is_vegetarian=_parse_bool(row["is_vegetarian"], default=False),
        is_vegan=_parse_bool(row["is_vegan"], default=False),
        price=_parse_price(row["price"]),
        calories=_parse_calories(row["calories"]),
        rating=_normalize_rating(row["rating"]),
        is_available=_parse_bool(row["is_available"], default=True),
    )


def _read_rows(path: Path, columns: list[str]) -> list[dict[str, Any]]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    # Ensure all expected columns exist
    for col in columns:
        if col not in df.columns:
            df[col] = ""
    return df[columns].to_dict(orient="records")


def _build(rows: list[dict[str, Any]], factory: Callable[[dict[str, Any]], T], source: Path) -> list[T]:
    entities: list[T] = []
    for index, row in enumerate(rows):
        try:
            entities.append(factory(row))
        except (ValidationError, ValueError) as exc:
            logger.warning("Skipping row %d of %s: %s", index + 1, source.name, exc)
    return entities


def load_catalog(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> InMemoryEntityStore:
    """Read venues and items from CSV and return them as an in-memory store."""
    venues = _build(_read_rows(config.venues_path, VENUE_COLUMNS), _venue_from_row, config.venues_path)
    items = _build(_read_rows(config.items_path, ITEM_COLUMNS), _item_from_row, config.items_path)
    logger.info("Loaded %d venues and %d items from %s", len(venues), len(items), config.data_dir)
    return InMemoryEntityStore(venues=venues, items=items)


def get_entity_store() -> InMemoryEntityStore:
    """Return the process-wide catalog store, loading it on first call."""
    global _store
    if _store is None:
        _store = load_catalog()
    return _store
