"""
Deduplicating storage for one kind of catalog entity.

Each store holds at most one entity per natural key; the first entity seen
for a key is the one kept, so every reference to that key shares it.
"""

import logging
from typing import Callable, Dict, Generic, Hashable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityStore(Generic[T]):
    """
    Holds the entities of one kind, keyed by their natural key.

    Args:
        kind: Human-readable entity kind, used in log messages
        key: Computes the natural key of an entity
        validator: Decides whether an entity may be stored
    """

    def __init__(
        self,
        kind: str,
        key: Callable[[T], Hashable],
        validator: Callable[[T], bool],
    ):
        self.kind = kind
        self._key = key
        self._validator = validator
        self._entities: Dict[Hashable, T] = {}

    def add(self, entity: T) -> bool:
        """
        Store ``entity`` unless it is invalid or its key is already taken.

        Returns:
            True if the entity was stored, False if it was skipped
        """
        if not self._validator(entity):
            logger.debug("Skipping invalid %s: %r", self.kind, entity)
            return False
        key = self._key(entity)
        if key in self._entities:
            logger.debug("Skipping duplicate %s: %r", self.kind, key)
            return False
        self._entities[key] = entity
        return True

    def add_all(self, entities: Iterable[T]) -> int:
        """Store every acceptable entity; returns how many were stored."""
        return sum(1 for entity in entities if self.add(entity))

    def get(self, key: Hashable) -> Optional[T]:
        return self._entities.get(key)

    def values(self) -> List[T]:
        return list(self._entities.values())

    def __contains__(self, entity: object) -> bool:
        try:
            return self._key(entity) in self._entities  # type: ignore[arg-type]
        except AttributeError:
            return False

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self):
        return iter(self._entities.values())
