from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class EntityKind(str, Enum):
    venue = "venue"
    item = "item"


class CuisineCategory(str, Enum):
    west_african = "West African"
    east_african = "East African"
    north_african = "North African"
    south_african = "South African"
    central_african = "Central African"


class _EntityBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    rating: float = Field(default=0.0, ge=0.0, le=5.0, description="0 means unrated")
    is_available: bool = True


class VenueEntity(_EntityBase):
    kind: Literal["venue"] = "venue"
    cuisine: CuisineCategory
    is_open: bool = True
    coordinate: Coordinate
    address: str = ""


class ItemEntity(_EntityBase):
    kind: Literal["item"] = "item"
    venue_id: str
    category: str | None = None
    origin: str | None = Field(default=None, description="Region or country of origin")
    spice_level: int = Field(default=0, ge=0, le=5)
    is_vegetarian: bool = False
    is_vegan: bool = False
    price: Decimal = Field(default=Decimal("0"), ge=0)
    calories: int | None = Field(default=None, ge=0)


SearchableEntity = Annotated[Union[VenueEntity, ItemEntity], Field(discriminator="kind")]


def category_label(entity: VenueEntity | ItemEntity) -> str | None:
    """Cuisine for venues, dish category for items."""
    if isinstance(entity, VenueEntity):
        return entity.cuisine.value
    return entity.category


def region_label(entity: VenueEntity | ItemEntity) -> str | None:
    if isinstance(entity, ItemEntity):
        return entity.origin
    return None


class SortKey(str, Enum):
    relevance = "relevance"
    rating = "rating"
    price = "price"
    name = "name"
    distance = "distance"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class FilterSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Venue facets
    cuisine: CuisineCategory | None = None
    open_only: bool | None = None
    max_distance_km: float | None = Field(default=None, ge=0.0)

    # Item facets
    max_price: Decimal | None = Field(default=None, ge=0)
    spice_level: int | None = Field(default=None, ge=0, le=5)
    vegetarian_only: bool | None = None
    vegan_only: bool | None = None
    category: str | None = None
    origin: str | None = None
    max_calories: int | None = Field(default=None, ge=0)

    # Common facets
    min_rating: float | None = Field(default=None, ge=0.0, le=5.0)
    available_only: bool | None = None
    kind: EntityKind | None = None

    sort_by: SortKey | None = None
    sort_order: SortOrder | None = None


class ScoredResult(BaseModel):
    entity: SearchableEntity
    relevance: int = Field(default=0, ge=0)
    distance_km: float | None = None
    distance_label: str | None = None
    travel_time: str | None = None


class SuggestionType(str, Enum):
    venue = "venue"
    item = "item"
    category = "category"
    region = "region"
    recent = "recent"


class Suggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    type: SuggestionType
    count: int = 1
    score: int = 0


class ErrorKind(str, Enum):
    retrieval_failure = "retrieval_failure"
    timeout = "timeout"


class SearchErrorInfo(BaseModel):
    kind: ErrorKind
    message: str
    retryable: bool = True
    entity_kind: EntityKind | None = None
    step: str | None = None


class SearchResponse(BaseModel):
    query: str
    results: list[ScoredResult] = Field(default_factory=list)
    total_matches: int = 0
    offset: int = 0
    limit: int = 0
    success: bool = True
    error: SearchErrorInfo | None = None


class SuggestionResponse(BaseModel):
    query: str
    suggestions: list[Suggestion] = Field(default_factory=list)
    from_recent: bool = False
    success: bool = True
    error: SearchErrorInfo | None = None


class SearchRequest(BaseModel):
    query: str = ""
    filters: FilterSpec | None = None
    location: Coordinate | None = None
    page_limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)
