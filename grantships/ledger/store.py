"""Mini README: Storage abstraction for ledger entities.

Structure:
    * Repository - abstract Create/Get/List/Update interface.
    * InMemoryRepository - dictionary-backed implementation used in-process.

Registries depend only on ``Repository`` so a persistent or shared backend
can replace the in-memory maps without touching ledger logic. Entities are
mutable dataclasses; callers mutate them under the relevant round lock and
then call ``update`` so non-memory backends can write the change through.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from operator import attrgetter
from typing import Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Keyed collection of ledger entities."""

    @abstractmethod
    def add(self, entity: T) -> T:
        """Insert a new entity, failing if its key is already present."""

    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        """Return the entity stored under ``key`` or ``None``."""

    @abstractmethod
    def list(self, predicate: Optional[Callable[[T], bool]] = None) -> List[T]:
        """Return entities matching ``predicate`` in insertion order."""

    @abstractmethod
    def update(self, entity: T) -> T:
        """Persist changes made to an existing entity."""

    def __len__(self) -> int:
        return len(self.list())


class InMemoryRepository(Repository[T]):
    """Thread-safe dictionary store keyed by an entity attribute."""

    def __init__(self, key: Callable[[T], str] = attrgetter("id")) -> None:
        self._key = key
        self._items: Dict[str, T] = {}
        self._lock = threading.Lock()

    def add(self, entity: T) -> T:
        key = self._key(entity)
        with self._lock:
            if key in self._items:
                raise KeyError(f"Entity {key} already exists")
            self._items[key] = entity
        return entity

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._items.get(key)

    def list(self, predicate: Optional[Callable[[T], bool]] = None) -> List[T]:
        with self._lock:
            items = list(self._items.values())
        if predicate is None:
            return items
        return [item for item in items if predicate(item)]

    def update(self, entity: T) -> T:
        key = self._key(entity)
        with self._lock:
            if key not in self._items:
                raise KeyError(f"Entity {key} not found")
            self._items[key] = entity
        return entity

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def newest_first(entities: List[T], attribute: str = "created_at") -> List[T]:
    """Order entities by timestamp descending, later insertions first on ties."""

    ranked = sorted(
        enumerate(entities),
        key=lambda pair: (getattr(pair[1], attribute), pair[0]),
        reverse=True,
    )
    return [entity for _, entity in ranked]
