"""In-memory repositories for character and starship records."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterable
from dataclasses import replace
from typing import Any, Generic, TypeVar

from .models import CharacterRecord, StarshipRecord

T = TypeVar("T")


class InMemoryRepository(Generic[T]):
    """Process-wide key/value store.

    Every operation holds the repository lock, so each get/save/delete is
    atomic with respect to the others. Sequences of operations are not.
    """

    def __init__(self, id_prefix: str) -> None:
        self._id_prefix = id_prefix
        self._items: dict[str, T] = {}
        self._sequence = itertools.count(1)
        self._lock = threading.RLock()

    def _next_id(self) -> str:
        # Explicitly supplied ids may already occupy the next generated value
        while True:
            candidate = f"{self._id_prefix}{next(self._sequence)}"
            if candidate not in self._items:
                return candidate

    def get(self, entity_id: str) -> T | None:
        with self._lock:
            return self._items.get(entity_id)

    def get_many(self, entity_ids: Iterable[str]) -> list[T | None]:
        """Batch lookup; the result is aligned with ``entity_ids``."""
        with self._lock:
            return [self._items.get(entity_id) for entity_id in entity_ids]

    def get_all(self) -> list[T]:
        with self._lock:
            return list(self._items.values())

    def exists(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._items

    def save(self, entity: T) -> T:
        """Insert or replace an entity, assigning an id when it has none."""
        with self._lock:
            entity_id: Any = getattr(entity, "id", None)
            if entity_id is None:
                entity = replace(entity, id=self._next_id())  # type: ignore[type-var]
                entity_id = entity.id  # type: ignore[attr-defined]
            self._items[entity_id] = entity
            return entity

    def delete_by_id(self, entity_id: str) -> bool:
        with self._lock:
            return self._items.pop(entity_id, None) is not None

    def delete_all(self) -> int:
        with self._lock:
            count = len(self._items)
            self._items.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class CharacterRepository(InMemoryRepository[CharacterRecord]):
    def __init__(self) -> None:
        super().__init__(id_prefix="c")


class StarshipRepository(InMemoryRepository[StarshipRecord]):
    def __init__(self) -> None:
        super().__init__(id_prefix="s")
