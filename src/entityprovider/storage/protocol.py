"""Storage protocol for swappable entity stores.

The storage layer abstracts the structured-storage engine, enabling:
- Local in-memory (default, for tests and prototyping)
- Database-backed stores (implemented outside this package)

Usage:
    store = LocalEntityStore()
    provider = EntityDataProvider(resource, store)
"""

from __future__ import annotations

from typing import Protocol

from entityprovider.core.entity import EntityTypeInfo, StoredEntity
from entityprovider.core.query import Query
from entityprovider.core.types import EntityKey


class EntityStore(Protocol):
    """Abstract entity store interface. Implementations own execution and locking."""

    def entity_info(self, entity_type: str) -> EntityTypeInfo:
        """Metadata of an entity type. Raises KeyError for unknown types."""
        ...

    def execute(self, query: Query) -> list[int]:
        """Canonical ids matching query, honoring order and range."""
        ...

    def count(self, query: Query) -> int:
        """Number of entities matching query, ignoring range."""
        ...

    def load(self, entity_type: str, entity_id: EntityKey) -> StoredEntity | None:
        """Load entity by canonical id."""
        ...

    def create(self, entity_type: str, bundle: str | None = None) -> StoredEntity:
        """New, unsaved entity."""
        ...

    def save(self, entity: StoredEntity) -> int:
        """Persist entity. Returns its canonical id."""
        ...

    def delete(self, entity_type: str, entity_id: EntityKey) -> bool:
        """Delete entity. Returns True if it existed."""
        ...

    def bundle_of(self, entity: StoredEntity) -> str | None:
        """Bundle of an entity (None for types without bundles)."""
        ...

    def entity_url(self, entity: StoredEntity) -> str | None:
        """Canonical URL of an entity, if its type exposes one."""
        ...
