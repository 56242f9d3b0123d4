"""Read-only entity store contract consumed by the search core."""
from __future__ import annotations

from abc import ABC, abstractmethod

from ..search.models import EntityKind, FilterSpec, ItemEntity, VenueEntity


class EntityStoreError(Exception):
    """Transport or storage failure raised by an EntityStore implementation."""


class EntityStore(ABC):
    """Answers text and facet queries over venues and items."""

    @abstractmethod
    async def find_by_text(self, term: str, kind: EntityKind) -> list[VenueEntity | ItemEntity]:
        """Return entities of *kind* whose text fields contain *term*."""

    @abstractmethod
    async def find_by_facet(
        self, spec: FilterSpec | None, kind: EntityKind
    ) -> list[VenueEntity | ItemEntity]:
        """Return entities of *kind* roughly matching *spec*; callers re-validate."""


__all__ = ["EntityStore", "EntityStoreError"]
