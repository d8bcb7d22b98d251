"""Storage backends."""

from entityprovider.storage.allocator import IdAllocator
from entityprovider.storage.local import LocalEntityStore
from entityprovider.storage.protocol import EntityStore

__all__ = [
    "EntityStore",
    "LocalEntityStore",
    "IdAllocator",
]
