"""Entity data provider: list, count, view, create, update and remove.

Usage:
    store = LocalEntityStore(EntityTypeInfo("node", bundle_key="type", bundles=("article",)))
    resources = ResourceRegistry(store)
    provider = EntityDataProvider(articles_definition, store, resources=resources)

    request = RequestContext.from_params({"sort": "-title", "range": "10"})
    for row in provider.list(request):
        print(row.to_dict())

    created = provider.create(RequestContext(method=HttpMethod.POST), {"title": "Hello"})
    created.items[0].id
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from entityprovider.config import ProviderSettings
from entityprovider.core.entity import StoredEntity
from entityprovider.core.errors import ClientError, ServerConfigurationError, UnprocessableError
from entityprovider.core.field import HttpMethod, Operation
from entityprovider.core.query import Query
from entityprovider.core.types import EntityKey
from entityprovider.observability import get_logger
from entityprovider.provider.access import AccessGuard
from entityprovider.provider.builder import QueryBuilder
from entityprovider.provider.ids import IdResolver
from entityprovider.provider.interpreter import EntityInterpreter, FieldCollection
from entityprovider.provider.properties import (
    EntityValidator,
    PropertySetter,
    raise_for_validation_errors,
)
from entityprovider.provider.relational import RelationalFilterResolver
from entityprovider.provider.request import RequestContext
from entityprovider.provider.resources import Resource, ResourceDefinition, ResourceRegistry
from entityprovider.storage import EntityStore

logger = get_logger(__name__)

Rows: TypeAlias = list[FieldCollection]
PublicIds: TypeAlias = list[Any]


@dataclass
class WriteResult:
    """Outcome of a write operation, with the response side effects it implies."""

    items: Rows = field(default_factory=list)
    status: int = 200
    location: str | None = None
    """Canonical URL of the written entity, when its type exposes one."""


class EntityDataProvider:
    """Implements the data operations of one resource over an entity store.

    Built once per resource and shared; the request context is passed into every call.

    Args:
        resource: Bound resource, or a definition to bind (and register when a
            resource registry is given).
        store: Entity store.
        resources: Registry of referenced resources, for nested filters and
            alternate ids of referenced entities.
        guard: Access checks (default: no entity-level opinion).
        validator: Save-time entity validation (default: none).
        pre_save: Hook run on the entity right before validation and save.
        settings: Provider settings (default: from environment).
    """

    def __init__(
        self,
        resource: Resource | ResourceDefinition,
        store: EntityStore,
        *,
        resources: ResourceRegistry | None = None,
        guard: AccessGuard | None = None,
        validator: EntityValidator | None = None,
        pre_save: Callable[[EntityInterpreter], None] | None = None,
        settings: ProviderSettings | None = None,
    ):
        if isinstance(resource, ResourceDefinition):
            resource = (
                resources.register(resource)
                if resources is not None
                else Resource.bind(resource, store)
            )
        self._resource = resource
        self._store = store
        self._guard = guard or AccessGuard()
        self._validator = validator
        self._pre_save = pre_save
        self._settings = settings or ProviderSettings()
        self._ids = IdResolver(resource, store, resources)
        self._builder = QueryBuilder(
            resource,
            self._ids,
            RelationalFilterResolver(resource, resources),
            default_range=self._settings.default_range,
        )
        self._setter = PropertySetter(resource, self._guard, self._settings.id_public_name)

    @property
    def resource(self) -> Resource:
        return self._resource

    @property
    def builder(self) -> QueryBuilder:
        return self._builder

    # Reading

    def list(self, request: RequestContext) -> Rows:
        """Current page of entities, rendered. Inaccessible rows are dropped."""
        rows = []
        for entity_id in self._store.execute(self.list_query(request)):
            row = self._render(request, entity_id, explicit=False)
            if row is not None:
                rows.append(row)
        return rows

    def count(self, request: RequestContext) -> int:
        """Number of entities matching the request filters, ignoring pagination."""
        query = self._builder.scope()
        query = self._builder.apply_filters(query, request.filters, strict=False)
        query = self._builder.add_extra_info(query)
        return self._store.count(query)

    def list_query(self, request: RequestContext) -> Query:
        """Query for the current page.

        Unsupported sort and filter fields are skipped; malformed filter targets and
        bad pagination raise ClientError.
        """
        query = self._builder.scope()
        query = self._builder.apply_sort(query, request.sorts, strict=False)
        query = self._builder.apply_filters(query, request.filters, strict=False)
        query = self._builder.apply_pagination(query, request.page, request.range)
        return self._builder.add_extra_info(query)

    def index_ids(self, request: RequestContext) -> PublicIds:
        """Public ids of the current page (alternate ids when the resource uses one)."""
        entity_ids = self._store.execute(self.list_query(request))
        id_field = self._resource.definition.id_field
        if not id_field:
            return list(entity_ids)
        descriptor = self._resource.fields.get(id_field)
        if descriptor is None:
            raise ServerConfigurationError(
                f"Resource '{self._resource.name}' uses unknown id field '{id_field}'"
            )
        ids = []
        for entity_id in entity_ids:
            entity = self._store.load(self._resource.entity_type, entity_id)
            if entity is not None:
                ids.append(descriptor.value(self._interpreter(request, entity)))
        return ids

    def view(
        self, request: RequestContext, identifier: EntityKey, *, explicit: bool = True
    ) -> FieldCollection | None:
        """Render one entity addressed by a caller-facing identifier.

        Args:
            request: Request context.
            identifier: Canonical or alternate id.
            explicit: The caller asked for this entity by id. A denied explicit view
                raises; a denied implicit one returns None.

        Returns:
            Field-limited, access-filtered view, or None when silently dropped.

        Raises:
            UnprocessableError: If the entity does not exist or is outside the bundles.
            PermissionDeniedError: If an explicit view is denied.
        """
        entity_id = self._resolve(request, identifier)
        return self._render(request, entity_id, explicit=explicit)

    def view_multiple(self, request: RequestContext, identifiers: Iterable[EntityKey]) -> Rows:
        """Render several entities, dropping inaccessible and absent ones."""
        rows = []
        for identifier in identifiers:
            try:
                row = self.view(request, identifier, explicit=False)
            except UnprocessableError as e:
                logger.info(
                    "entity_skipped",
                    resource=self._resource.name,
                    identifier=identifier,
                    reason=e.message,
                )
                continue
            if row is not None:
                rows.append(row)
        return rows

    # Writing

    def create(self, request: RequestContext, payload: Any) -> WriteResult:
        """Create an entity of the resource's first bundle from payload.

        The new entity is rendered as a GET request would see it.

        Raises:
            ClientError: On a malformed, unknown or empty payload, or validation errors.
            PermissionDeniedError: If creation is denied.
        """
        self._validate_body(payload)
        info = self._resource.entity_info
        bundle = self._resource.bundles[0] if info.bundle_key and self._resource.bundles else None
        entity = self._store.create(self._resource.entity_type, bundle)
        self._guard.authorize(
            Operation.CREATE, self._resource.entity_type, entity, request.account
        )

        interpreter = self._interpreter(request, entity)
        self._set_property_values(request, interpreter, payload, replace=True)
        logger.info("entity_created", resource=self._resource.name, entity_id=entity.id)

        row = self._render(request.read_as(HttpMethod.GET), entity.id, explicit=True)
        return WriteResult(
            items=[row] if row is not None else [], status=201, location=interpreter.url
        )

    def update(
        self,
        request: RequestContext,
        identifier: EntityKey,
        payload: Any,
        replace: bool = False,
    ) -> WriteResult:
        """Update an entity. With replace, omitted editable fields are cleared.

        Raises:
            ClientError: On a malformed, unknown or empty payload, or validation errors.
            UnprocessableError: If the entity cannot be found.
            PermissionDeniedError: If the update is denied.
        """
        self._validate_body(payload)
        entity_id = self._resolve(request, identifier)
        entity = self._load_valid_entity(request, Operation.UPDATE, entity_id)
        if entity is None:
            raise UnprocessableError(f"The entity ID {entity_id} is not valid.")

        interpreter = self._interpreter(request, entity)
        self._set_property_values(request, interpreter, payload, replace=replace)
        logger.info(
            "entity_updated", resource=self._resource.name, entity_id=entity.id, replace=replace
        )

        row = self._render(request.read_as(HttpMethod.GET), entity.id, explicit=True)
        return WriteResult(
            items=[row] if row is not None else [], status=201, location=interpreter.url
        )

    def remove(self, request: RequestContext, identifier: EntityKey) -> WriteResult:
        """Delete an entity. Deletion requires update access.

        Raises:
            UnprocessableError: If the entity cannot be found.
            PermissionDeniedError: If the caller may not update the entity.
        """
        entity_id = self._resolve(request, identifier)
        self._load_valid_entity(request, Operation.UPDATE, entity_id)
        self._store.delete(self._resource.entity_type, entity_id)
        logger.info("entity_removed", resource=self._resource.name, entity_id=entity_id)
        return WriteResult(status=204)

    # Identifiers

    def canonical_path(self, request: RequestContext, path: str) -> str:
        """Map a separator-delimited list of caller ids to canonical ids, in order."""
        separator = self._settings.ids_separator
        return separator.join(
            str(self._resolve(request, part)) for part in str(path).split(separator)
        )

    def context(self, identifier: EntityKey | Iterable[EntityKey]) -> dict[str, str]:
        """Cache context of a request for an identifier (or list of identifiers)."""
        if isinstance(identifier, str | int):
            joined = str(identifier)
        else:
            joined = self._settings.ids_separator.join(str(i) for i in identifier)
        return {"et": self._resource.entity_type, "ei": joined}

    # Hooks

    def entity_pre_save(self, interpreter: EntityInterpreter) -> None:
        """Change the entity right before it is validated and saved."""
        if self._pre_save is not None:
            self._pre_save(interpreter)

    def entity_validate(self, interpreter: EntityInterpreter) -> None:
        """Validate the entity, raising errors addressed to public fields.

        Raises:
            EntityValidationError: If failing properties map to public fields.
            ClientError: If they don't.
        """
        if self._validator is None:
            return
        errors = self._validator.validate(interpreter.entity)
        raise_for_validation_errors(errors, self._resource.fields)

    # Internals

    def _resolve(self, request: RequestContext, identifier: EntityKey) -> EntityKey:
        id_field = request.load_by_field_name or self._resource.definition.id_field
        return self._ids.resolve(identifier, id_field)

    def _interpreter(self, request: RequestContext, entity: StoredEntity) -> EntityInterpreter:
        return EntityInterpreter(request.account, entity, self._store)

    def _load_valid_entity(
        self,
        request: RequestContext,
        op: Operation,
        entity_id: EntityKey,
        *,
        explicit: bool = True,
    ) -> StoredEntity | None:
        """Load an entity and check that it belongs to the resource and is accessible.

        Returns:
            The entity, or None for a silently dropped list item.

        Raises:
            UnprocessableError: If the entity does not exist or is outside the bundles.
            PermissionDeniedError: If access is denied (except implicit views).
        """
        entity = self._store.load(self._resource.entity_type, entity_id)
        if entity is None:
            raise UnprocessableError(f"The entity ID {entity_id} does not exist.")

        bundles = self._resource.bundles
        if bundles and self._store.bundle_of(entity) not in bundles:
            raise UnprocessableError(f"The entity ID {entity_id} is not valid.")

        allowed = self._guard.authorize(
            op,
            self._resource.entity_type,
            entity,
            request.account,
            explicit=explicit,
            entity_id=entity_id,
        )
        return entity if allowed else None

    def _render(
        self, request: RequestContext, entity_id: EntityKey | None, *, explicit: bool
    ) -> FieldCollection | None:
        if entity_id is None:
            return None
        entity = self._load_valid_entity(request, Operation.VIEW, entity_id, explicit=explicit)
        if entity is None:
            return None

        interpreter = self._interpreter(request, entity)
        id_name = self._resource.definition.id_field or self._settings.id_public_name
        collection = FieldCollection(interpreter, id_field=self._resource.fields.get(id_name))
        limit_fields = request.fields
        for descriptor in self._resource.fields:
            if limit_fields and descriptor.public_name not in limit_fields:
                continue
            if not self._guard.method_access(descriptor, request.method):
                continue
            if not self._guard.field_access(descriptor, Operation.VIEW, interpreter):
                continue
            collection.set(descriptor)
        return collection

    def _set_property_values(
        self,
        request: RequestContext,
        interpreter: EntityInterpreter,
        payload: Any,
        replace: bool,
    ) -> None:
        self._setter.apply(interpreter, payload, request.method, replace)
        self.entity_pre_save(interpreter)
        self.entity_validate(interpreter)
        self._store.save(interpreter.entity)

    @staticmethod
    def _validate_body(payload: Any) -> None:
        if payload is not None and not isinstance(payload, Mapping):
            raise ClientError(f"Incorrect object parsed: {payload!r}")
