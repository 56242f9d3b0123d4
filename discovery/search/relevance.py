"""Heuristic text relevance between a query term and entity fields."""
from __future__ import annotations

from .models import ItemEntity, VenueEntity

EXACT_MATCH_SCORE = 100
PREFIX_MATCH_SCORE = 50
SUBSTRING_MATCH_SCORE = 25
WHOLE_WORD_BONUS = 30


def normalize_query(text: str | None) -> str:
    """Trim and lower-case a raw query."""
    if not text:
        return ""
    return text.strip().casefold()


def score_field(term: str, field: str | None) -> int:
    """Score a single field against an already-normalized *term*."""
    if not term or not field:
        return 0

    value = field.strip().casefold()
    if not value:
        return 0
    if value == term:
        return EXACT_MATCH_SCORE

    if value.startswith(term):
        score = PREFIX_MATCH_SCORE
    elif term in value:
        score = SUBSTRING_MATCH_SCORE
    else:
        return 0

    # Delimited by spaces or the string edges. A mid-string whole word (55)
    # outranks a prefix inside a word (50).
    if f" {term} " in f" {value} ":
        score += WHOLE_WORD_BONUS
    return score


def score_fields(term: str, *fields: str | None) -> int:
    return sum(score_field(term, field) for field in fields)


def entity_fields(entity: VenueEntity | ItemEntity) -> tuple[str | None, ...]:
    """Text fields of an entity in priority order."""
    if isinstance(entity, VenueEntity):
        return (entity.name, entity.description, entity.cuisine.value, entity.address)
    return (entity.name, entity.description, entity.category, entity.origin)


def score_entity(term: str, entity: VenueEntity | ItemEntity) -> int:
    return score_fields(term, *entity_fields(entity))
