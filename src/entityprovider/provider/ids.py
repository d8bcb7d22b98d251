"""Identifier resolution: alternate ids -> canonical ids."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from entityprovider.core.errors import ClientError, UnprocessableError
from entityprovider.core.field import AddressingKind, FieldDescriptor
from entityprovider.core.query import Operator, add_descriptor_condition, scope_query
from entityprovider.core.types import EntityKey
from entityprovider.observability import get_logger
from entityprovider.provider.resources import Resource, ResourceRegistry
from entityprovider.storage import EntityStore

logger = get_logger(__name__)


class IdResolver:
    """Resolves caller-facing identifiers into canonical store ids.

    When several entities share an alternate id, the first row in store order wins.
    Uniqueness of alternate ids is up to the resource owner.

    Args:
        resource: Resource whose identifiers are resolved.
        store: Store executing lookup queries.
        resources: Registry used to reach referenced resources (optional).
    """

    def __init__(
        self, resource: Resource, store: EntityStore, resources: ResourceRegistry | None = None
    ):
        self._resource = resource
        self._store = store
        self._resources = resources

    def resolve(self, request_id: EntityKey, id_field: str | None = None) -> EntityKey:
        """Resolve an identifier addressed through id_field.

        Args:
            request_id: Identifier as supplied by the caller.
            id_field: Public field the identifier belongs to. None means the identifier
                is already canonical.

        Returns:
            Canonical id.

        Raises:
            ClientError: If id_field is unknown or has no storage property.
            UnprocessableError: If no entity matches.
        """
        if not id_field:
            return request_id
        descriptor = self._resource.fields.get(id_field)
        if descriptor is None or descriptor.storage_property is None:
            raise ClientError(f'Cannot load an entity using the field "{id_field}"')

        query = scope_query(self._resource.entity_info, self._resource.bundles).with_range(0, 1)
        query = add_descriptor_condition(
            query, descriptor, request_id, Operator.EQ, self._resource.entity_info
        )
        result = self._store.execute(query)
        if not result:
            raise UnprocessableError(f"The entity ID {request_id} by {id_field} cannot be loaded.")
        logger.debug(
            "alternate_id_resolved",
            resource=self._resource.name,
            field=id_field,
            request_id=request_id,
            entity_id=result[0],
        )
        return result[0]

    def resolve_referenced(self, value: Any, descriptor: FieldDescriptor) -> Any:
        """Translate a filter value on a reference field into the referenced canonical id.

        Only applies to descriptors with both a referenced resource and a
        referenced_id_property. When nothing matches, the original value is returned.
        """
        link = descriptor.referenced_resource
        id_property = descriptor.referenced_id_property
        if not id_property or link is None or self._resources is None:
            return value
        target = self._resources.get(link)

        query = scope_query(target.entity_info, target.bundles).with_range(0, 1)
        id_descriptor = next(
            (d for d in target.fields if d.storage_property == id_property),
            FieldDescriptor(id_property, storage_property=id_property),
        )
        if id_descriptor.addressing is AddressingKind.FIELD:
            query = query.where_field(id_property, id_descriptor.column, value)
        else:
            query = query.where_property(target.entity_info.column_for(id_property), value)
        result = self._store.execute(query)
        if not result:
            return value
        return result[0]

    def resolve_referenced_many(
        self, values: Iterable[Any], descriptor: FieldDescriptor
    ) -> tuple[Any, ...]:
        return tuple(self.resolve_referenced(value, descriptor) for value in values)
