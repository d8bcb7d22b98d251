"""Query construction from request clauses.

Usage:
    builder = QueryBuilder(resource, ids, relational)
    query = builder.scope()
    query = builder.apply_sort(query, request.sorts, strict=False)
    query = builder.apply_filters(query, request.filters, strict=False)
    query = builder.apply_pagination(query, request.page, request.range)
    query = builder.add_extra_info(query)
"""

from __future__ import annotations

from collections.abc import Sequence

from entityprovider.core.errors import ServerConfigurationError, UnsupportedFieldError
from entityprovider.core.query import (
    FilterClause,
    Query,
    SortClause,
    SortDirection,
    add_descriptor_condition,
    add_descriptor_ordering,
    pagination_range,
    scope_query,
    validate_filter_targets,
)
from entityprovider.observability import get_logger
from entityprovider.provider.ids import IdResolver
from entityprovider.provider.relational import RelationalFilterResolver
from entityprovider.provider.resources import Resource

logger = get_logger(__name__)

DEFAULT_SORT: tuple[SortClause, ...] = (SortClause("id", SortDirection.ASC),)


class QueryBuilder:
    """Translates public filter, sort and pagination clauses into a storage Query.

    Strict mode raises on unsupported fields. Lenient mode (list and count requests)
    logs them and skips the offending clause. Malformed filter targets always raise.

    Args:
        resource: Resource being queried.
        ids: Resolver for alternate ids in reference filter values.
        relational: Resolver for nested filter paths.
        default_range: Page size when the resource sets none.
    """

    def __init__(
        self,
        resource: Resource,
        ids: IdResolver,
        relational: RelationalFilterResolver,
        default_range: int = 50,
    ):
        self._resource = resource
        self._ids = ids
        self._relational = relational
        self._max_range = resource.definition.range or default_range

    @property
    def max_range(self) -> int:
        return self._max_range

    def scope(self) -> Query:
        """Query scoped to the resource's entity type and bundles."""
        return scope_query(self._resource.entity_info, self._resource.bundles)

    def apply_filters(
        self, query: Query, filters: Sequence[FilterClause], *, strict: bool = True
    ) -> Query:
        """Add conditions and relationships for filter clauses.

        Args:
            query: Query to extend.
            filters: Parsed filter clauses.
            strict: Raise on unsupported fields instead of skipping them.

        Returns:
            Extended query.

        Raises:
            ClientError: If a target does not prefix its field (always), or, in strict
                mode, if a field is not filterable.
            ServerConfigurationError: In strict mode, if a nested path is not modeled.
        """
        validate_filter_targets(filters)
        for clause in filters:
            try:
                query = self._apply_filter(query, clause)
            except UnsupportedFieldError as e:
                if strict:
                    raise
                logger.warning(
                    "filter_skipped",
                    resource=self._resource.name,
                    field=clause.public_field,
                    reason=e.message,
                )
            except ServerConfigurationError as e:
                if strict:
                    raise
                logger.error(
                    "filter_misconfigured",
                    resource=self._resource.name,
                    field=clause.public_field,
                    operators=[op.value for op in clause.operators],
                    values=list(clause.values),
                    reason=e.message,
                )
        return query

    def _apply_filter(self, query: Query, clause: FilterClause) -> Query:
        descriptor = self._resource.fields.get(clause.public_field)
        if descriptor is None:
            if not clause.is_nested():
                logger.warning(
                    "filter_field_unknown", resource=self._resource.name, field=clause.public_field
                )
                return query
            if clause.target:
                # Aimed at a nested resource, which applies it itself.
                return query
            return query.with_relationship(self._relational.relationship(clause))

        if descriptor.storage_property is None:
            raise UnsupportedFieldError(
                f'The current filter "{clause.public_field}" selection does not map to any '
                "entity property or Field API field."
            )

        info = self._resource.entity_info
        first = clause.operators[0]
        if first.takes_value_set():
            values = self._ids.resolve_referenced_many(clause.values, descriptor)
            return add_descriptor_condition(query, descriptor, values, first, info)
        for operator, value in zip(clause.operators, clause.values, strict=False):
            value = self._ids.resolve_referenced(value, descriptor)
            query = add_descriptor_condition(query, descriptor, value, operator, info)
        return query

    def apply_sort(
        self, query: Query, sorts: Sequence[SortClause], *, strict: bool = True
    ) -> Query:
        """Add orderings. Without request sorts, the resource default (or ``id``) applies.

        Raises:
            UnsupportedFieldError: In strict mode, if a sort field is computed.
        """
        requested = bool(sorts)
        sorts = sorts or self._resource.definition.default_sort or DEFAULT_SORT
        for clause in sorts:
            descriptor = self._resource.fields.get(clause.public_field)
            if descriptor is None:
                if requested:
                    logger.warning(
                        "sort_field_unknown",
                        resource=self._resource.name,
                        field=clause.public_field,
                    )
                continue
            if descriptor.storage_property is None:
                error = UnsupportedFieldError(
                    "The current sort selection does not map to any entity property or "
                    "Field API field."
                )
                if strict:
                    raise error
                logger.warning(
                    "sort_skipped",
                    resource=self._resource.name,
                    field=clause.public_field,
                    reason=error.message,
                )
                continue
            query = add_descriptor_ordering(
                query, descriptor, clause.direction, self._resource.entity_info
            )
        return query

    def apply_pagination(self, query: Query, page: int = 1, size: int | None = None) -> Query:
        """Restrict the query to one page. Page 1 starts at offset 0.

        The requested size is capped at the resource's range.

        Raises:
            ClientError: If page or size is lower than 1.
        """
        size = self._max_range if size is None else min(size, self._max_range)
        offset, count = pagination_range(page, size)
        return query.with_range(offset, count)

    def add_extra_info(self, query: Query) -> Query:
        """Tag and annotate the query for the store.

        The generic access tag is only needed when no field condition or ordering
        already joins the entity tables.
        """
        if not query.field_conditions and not query.order:
            query = query.tagged(f"{self._resource.entity_type}_access")
        return query.with_metadata("data_provider", self._resource.name)
