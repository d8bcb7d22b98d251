"""Entity functionality: stored entity records and entity type metadata."""

from entityprovider.core.entity.models import EntityTypeInfo, StoredEntity

__all__ = [
    "EntityTypeInfo",
    "StoredEntity",
]
