"""EntityStore backed by Python lists, used by the CSV catalog and tests."""
from __future__ import annotations

from typing import Iterable

from ..search.models import EntityKind, FilterSpec, ItemEntity, VenueEntity
from ..search.relevance import entity_fields
from .store import EntityStore


class InMemoryEntityStore(EntityStore):
    """Keeps venues and items in memory and scans them per query."""

    def __init__(
        self,
        venues: Iterable[VenueEntity] = (),
        items: Iterable[ItemEntity] = (),
    ) -> None:
        self._entities: dict[EntityKind, tuple[VenueEntity | ItemEntity, ...]] = {
            EntityKind.venue: tuple(venues),
            EntityKind.item: tuple(items),
        }

    @property
    def venues(self) -> tuple[VenueEntity, ...]:
        return self._entities[EntityKind.venue]  # type: ignore[return-value]

    @property
    def items(self) -> tuple[ItemEntity, ...]:
        return self._entities[EntityKind.item]  # type: ignore[return-value]

    async def find_by_text(self, term: str, kind: EntityKind) -> list[VenueEntity | ItemEntity]:
        needle = term.strip().casefold()
        if not needle:
            return list(self._entities[kind])
        return [
            entity
            for entity in self._entities[kind]
            if any(field and needle in field.casefold() for field in entity_fields(entity))
        ]

    async def find_by_facet(
        self, spec: FilterSpec | None, kind: EntityKind
    ) -> list[VenueEntity | ItemEntity]:
        entities = list(self._entities[kind])
        if spec is None:
            return entities
        if spec.kind is not None and spec.kind != kind:
            return []

        # Exact-equality facets only; ranges are left to the caller.
        if kind == EntityKind.venue:
            if spec.cuisine is not None:
                entities = [v for v in entities if v.cuisine == spec.cuisine]
            if spec.open_only:
                entities = [v for v in entities if v.is_open]
        else:
            if spec.category:
                wanted = spec.category.casefold()
                entities = [i for i in entities if (i.category or "").casefold() == wanted]
            if spec.vegetarian_only:
                entities = [i for i in entities if i.is_vegetarian]
            if spec.vegan_only:
                entities = [i for i in entities if i.is_vegan]
        return entities


__all__ = ["InMemoryEntityStore"]
