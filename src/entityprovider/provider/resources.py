"""Resource definitions and the resource registry.

Usage:
    articles = ResourceDefinition(
        name="articles",
        entity_type="node",
        bundles=("article",),
        fields=(
            FieldDescriptor("id", storage_property="nid"),
            FieldDescriptor("title", storage_property="title"),
        ),
    )
    resources = ResourceRegistry(store)
    resource = resources.register(articles)
    resources.get(ResourceLink("articles"))  # the same bound Resource
"""

from __future__ import annotations

from dataclasses import dataclass, field

from entityprovider.core.entity import EntityTypeInfo
from entityprovider.core.errors import ServerConfigurationError
from entityprovider.core.field import FieldDefinitionRegistry, FieldDescriptor, ResourceLink
from entityprovider.core.query import SortClause
from entityprovider.storage import EntityStore


@dataclass(frozen=True)
class ResourceDefinition:
    """Declarative description of a resource over one entity type."""

    name: str
    entity_type: str
    fields: tuple[FieldDescriptor, ...]
    bundles: tuple[str, ...] = ()
    major_version: int = 1
    minor_version: int = 0
    id_field: str | None = None
    """Public field used as alternate identifier in paths (default: canonical id)."""
    default_sort: tuple[SortClause, ...] = ()
    range: int | None = None
    """Maximum page size of lists (default: settings.default_range)."""

    @property
    def link(self) -> ResourceLink:
        return ResourceLink(self.name, self.major_version, self.minor_version)


@dataclass(frozen=True)
class Resource:
    """A resource definition bound to its store's entity metadata.

    Built once and only read afterwards.
    """

    definition: ResourceDefinition
    entity_info: EntityTypeInfo
    fields: FieldDefinitionRegistry = field(repr=False)

    @classmethod
    def bind(cls, definition: ResourceDefinition, store: EntityStore) -> Resource:
        """Resolve a definition against the store.

        Raises:
            ServerConfigurationError: If the entity type is missing or unknown to the store.
        """
        if not definition.entity_type:
            raise ServerConfigurationError("The entity type was not provided.")
        try:
            info = store.entity_info(definition.entity_type)
        except KeyError as e:
            raise ServerConfigurationError(
                f"Resource '{definition.name}' uses unknown entity type "
                f"'{definition.entity_type}'"
            ) from e
        registry = FieldDefinitionRegistry.build(definition.fields, info, definition.bundles)
        return cls(definition=definition, entity_info=info, fields=registry)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def entity_type(self) -> str:
        return self.definition.entity_type

    @property
    def bundles(self) -> tuple[str, ...]:
        """Effective bundles: declared, else every bundle of the entity type."""
        return self.fields.bundles

    @property
    def link(self) -> ResourceLink:
        return self.definition.link


class ResourceRegistry:
    """Resolves resource links to bound resources.

    Injected wherever one resource needs another (nested filters, alternate ids of
    referenced entities).

    Args:
        store: Store every registered resource is bound against.
    """

    def __init__(self, store: EntityStore):
        self._store = store
        self._resources: dict[str, Resource] = {}

    def register(self, definition: ResourceDefinition) -> Resource:
        """Bind and register a definition. Re-registering replaces the old one."""
        resource = Resource.bind(definition, self._store)
        self._resources[definition.link.instance_id] = resource
        return resource

    def get(self, link: ResourceLink) -> Resource:
        """Bound resource for link.

        Raises:
            ServerConfigurationError: If no resource is registered under the link.
        """
        try:
            return self._resources[link.instance_id]
        except KeyError:
            raise ServerConfigurationError(
                f"Resource '{link.instance_id}' is not registered"
            ) from None

    def __contains__(self, link: object) -> bool:
        return isinstance(link, ResourceLink) and link.instance_id in self._resources
