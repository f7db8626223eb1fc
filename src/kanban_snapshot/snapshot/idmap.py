"""
Id reconciliation helpers.

IdMap records, per entity type, which backend id each document id was
given during one import run. NameIndex provides the case-insensitive
name lookups merge mode uses to reuse existing entities.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Generic, Iterable, Optional, Protocol, TypeVar

from kanban_snapshot.constants import EntityType

logger = logging.getLogger(__name__)


class IdMap:
    """Entity type -> document id -> backend id."""

    def __init__(self) -> None:
        self._maps: dict[EntityType, dict[str, int]] = {entity: {} for entity in EntityType}

    def set(self, entity: EntityType, old_id: Any, new_id: int) -> None:
        self._maps[entity][str(old_id)] = new_id

    def get(self, entity: EntityType, old_id: Any) -> Optional[int]:
        """Backend id for ``old_id``, or None when absent or unmapped."""
        if old_id is None:
            return None
        return self._maps[entity].get(str(old_id))

    def contains(self, entity: EntityType, old_id: Any) -> bool:
        return self.get(entity, old_id) is not None

    def resolve_many(self, entity: EntityType, old_ids: Iterable[Any]) -> list[int]:
        """Resolve each id in order, dropping the ones that are not mapped."""
        resolved = []
        for old_id in old_ids:
            new_id = self.get(entity, old_id)
            if new_id is not None:
                resolved.append(new_id)
        return resolved

    def __repr__(self) -> str:
        sizes = ", ".join(f"{e.value}={len(m)}" for e, m in self._maps.items())
        return f"IdMap({sizes})"


class Named(Protocol):
    id: int
    name: str


N = TypeVar("N", bound=Named)


class NameIndex(Generic[N]):
    """
    Case-insensitive name lookup over a backend listing.

    Backend creations are not reflected in a list read earlier, so callers
    must ``refresh()`` before any lookup that has to see prior writes. A
    failed refresh keeps the last successful listing.
    """

    def __init__(self, loader: Callable[[], Awaitable[list[N]]], label: str) -> None:
        self._loader = loader
        self._label = label
        self._items: list[N] = []
        self.refresh_count = 0

    async def refresh(self) -> None:
        """Re-read the listing from the backend."""
        self.refresh_count += 1
        try:
            self._items = list(await self._loader())
        except Exception as e:
            logger.warning("Could not refresh %s listing, using previous: %s", self._label, e)

    def find(self, name: Optional[str]) -> Optional[N]:
        key = (name or "").casefold()
        for item in self._items:
            if item.name.casefold() == key:
                return item
        return None

    def __len__(self) -> int:
        return len(self._items)
