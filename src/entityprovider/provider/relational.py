"""Nested (relational) filters across resources.

A filter on ``author.name`` over articles reads: articles whose ``author`` references a
user whose ``name`` matches. Each segment but the last must be a reference field whose
resource is known, so that the next segment can be looked up in that resource.
"""

from __future__ import annotations

from entityprovider.core.entity import EntityTypeInfo
from entityprovider.core.errors import (
    ClientError,
    ServerConfigurationError,
    UnsupportedFieldError,
)
from entityprovider.core.field import FieldDefinitionRegistry, FieldDescriptor
from entityprovider.core.query import FilterClause, RelationalHop, Relationship
from entityprovider.observability import get_logger
from entityprovider.provider.resources import Resource, ResourceRegistry

logger = get_logger(__name__)


def _hop(descriptor: FieldDescriptor, storage_property: str, info: EntityTypeInfo) -> RelationalHop:
    """Hop addressing descriptor's storage on entities described by info."""
    if descriptor.is_field:
        return RelationalHop(storage_property, descriptor.addressing, column=descriptor.column)
    return RelationalHop(info.column_for(storage_property), descriptor.addressing)


class RelationalFilterResolver:
    """Expands dotted public paths into relationship hop chains.

    Args:
        resource: Resource the path starts from.
        resources: Registry used to follow referenced resources.
    """

    def __init__(self, resource: Resource, resources: ResourceRegistry | None = None):
        self._resource = resource
        self._resources = resources

    def hops(self, public_field: str) -> tuple[RelationalHop, ...]:
        """Resolve a dotted path into hops.

        Args:
            public_field: Dot-separated public field names, at least two segments.

        Returns:
            One hop per segment. All but the last carry the referenced entity type and
            bundles.

        Raises:
            ClientError: If a segment names no field.
            ServerConfigurationError: If an intermediate field has no referenced resource,
                or the referenced resource is not registered.
            UnsupportedFieldError: If the last field has no storage property.
        """
        *joins, last = public_field.split(".")
        definitions: FieldDefinitionRegistry = self._resource.fields
        info = self._resource.entity_info
        hops: list[RelationalHop] = []

        for public_name in joins:
            descriptor = self._lookup(definitions, public_name, public_field)
            if descriptor.referenced_resource is None:
                raise ServerConfigurationError(
                    f"The nested field {public_field} cannot be accessed because "
                    f"{public_name} has no resource associated to it."
                )
            if descriptor.storage_property is None:
                raise UnsupportedFieldError(
                    f'The nested field "{public_field}" crosses "{public_name}", which does '
                    "not map to any entity property or Field API field."
                )
            if self._resources is None:
                raise ServerConfigurationError(
                    f"The nested field {public_field} cannot be accessed without a "
                    "resource registry."
                )
            target = self._resources.get(descriptor.referenced_resource)
            hop = _hop(descriptor, descriptor.storage_property, info)
            hops.append(
                RelationalHop(
                    hop.name,
                    hop.kind,
                    column=hop.column,
                    entity_type=target.entity_type,
                    bundles=target.bundles,
                )
            )
            definitions, info = target.fields, target.entity_info

        descriptor = self._lookup(definitions, last, public_field)
        if descriptor.storage_property is None:
            raise UnsupportedFieldError(
                f'The current filter "{public_field}" selection does not map to any entity '
                "property or Field API field."
            )
        hops.append(_hop(descriptor, descriptor.storage_property, info))
        return tuple(hops)

    def relationship(self, clause: FilterClause) -> Relationship:
        """Relationship descriptor for a nested filter clause."""
        hops = self.hops(clause.public_field)
        logger.debug(
            "nested_filter_resolved",
            resource=self._resource.name,
            field=clause.public_field,
            hops=len(hops),
        )
        return Relationship(
            public_field=clause.public_field,
            hops=hops,
            operators=clause.operators,
            values=clause.values,
            conjunction=clause.conjunction,
        )

    @staticmethod
    def _lookup(
        definitions: FieldDefinitionRegistry, public_name: str, public_field: str
    ) -> FieldDescriptor:
        descriptor = definitions.get(public_name)
        if descriptor is None:
            raise ClientError(
                f'The nested filter "{public_field}" references unknown field "{public_name}".'
            )
        return descriptor
