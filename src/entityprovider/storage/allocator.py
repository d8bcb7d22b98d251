"""Entity id allocation service.

IdAllocator is a stateful service that hands out canonical ids per entity type.
"""

from __future__ import annotations


class IdAllocator:
    """Allocates auto-increment ids, one sequence per entity type.

    Ids are never reused after deletion, matching serial primary keys.

    Args:
        start: First id handed out for every entity type (default 1).
    """

    def __init__(self, start: int = 1):
        """Initialize allocator.

        Args:
            start: First id handed out for every entity type (default 1).
        """
        self._start = start
        self._next: dict[str, int] = {}

    def allocate(self, entity_type: str) -> int:
        """Allocate the next id of an entity type.

        Args:
            entity_type: Entity type the id belongs to.

        Returns:
            Newly allocated id.
        """
        entity_id = self._next.get(entity_type, self._start)
        self._next[entity_type] = entity_id + 1
        return entity_id

    def observe(self, entity_type: str, entity_id: int) -> None:
        """Move the sequence past an externally chosen id.

        Args:
            entity_type: Entity type the id belongs to.
            entity_id: Id that is now taken.
        """
        if entity_id >= self._next.get(entity_type, self._start):
            self._next[entity_type] = entity_id + 1
