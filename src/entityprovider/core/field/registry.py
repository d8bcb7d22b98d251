"""Field definition registry.

Usage:
    registry = FieldDefinitionRegistry.build(
        (FieldDescriptor("id", storage_property="id"), FieldDescriptor("title", "title")),
        entity_info=info,
        bundles=("article",),
    )
    registry.get("title")
    [descriptor.public_name for descriptor in registry]  # declaration order
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from entityprovider.core.entity import EntityTypeInfo
from entityprovider.core.errors import ServerConfigurationError
from entityprovider.core.field.models import FieldDescriptor


class FieldDefinitionRegistry:
    """Immutable mapping of public field name -> FieldDescriptor for one resource.

    Built once per resource and only read afterwards, so one instance can be shared by
    concurrent requests.
    """

    __slots__ = ("_by_name", "_bundles")

    def __init__(self, descriptors: Iterable[FieldDescriptor], bundles: tuple[str, ...] = ()):
        """Initialize registry from descriptors in declaration order.

        Args:
            descriptors: Field descriptors, first declared first.
            bundles: Effective bundle set of the owning resource.

        Raises:
            ServerConfigurationError: If two descriptors share a public name.
        """
        by_name: dict[str, FieldDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.public_name in by_name:
                raise ServerConfigurationError(
                    f"Public field '{descriptor.public_name}' is declared more than once"
                )
            by_name[descriptor.public_name] = descriptor
        self._by_name = by_name
        self._bundles = tuple(bundles)

    @classmethod
    def build(
        cls,
        descriptors: Iterable[FieldDescriptor],
        entity_info: EntityTypeInfo,
        bundles: Iterable[str] = (),
    ) -> FieldDefinitionRegistry:
        """Build a registry, resolving bundle restrictions eagerly.

        Descriptors without their own bundles inherit the resource bundles. A resource
        without bundles covers every bundle of its entity type.

        Args:
            descriptors: Field descriptors in declaration order.
            entity_info: Metadata of the resource's entity type.
            bundles: Bundles declared by the resource (may be empty).

        Returns:
            Registry whose descriptors all carry a bundle restriction.
        """
        resolved = tuple(bundles) or entity_info.bundles
        return cls(
            (d if d.bundles else d.with_bundles(resolved) for d in descriptors),
            bundles=resolved,
        )

    @property
    def bundles(self) -> tuple[str, ...]:
        """Effective bundles of the resource (empty when the type has none)."""
        return self._bundles

    def get(self, public_name: str) -> FieldDescriptor | None:
        return self._by_name.get(public_name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def public_name_for_property(self, storage_property: str) -> str | None:
        """First public field backed by a storage property, if any."""
        for descriptor in self._by_name.values():
            if descriptor.storage_property == storage_property:
                return descriptor.public_name
        return None

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self._by_name.values())

    def __contains__(self, public_name: object) -> bool:
        return public_name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)
