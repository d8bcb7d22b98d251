"""Query operations: scoping, descriptor dispatch, target validation and comparison."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from entityprovider.core.entity import EntityTypeInfo
from entityprovider.core.errors import ClientError
from entityprovider.core.field import FieldDescriptor
from entityprovider.core.query.models import FilterClause, Operator, Query, SortDirection


def scope_query(entity_info: EntityTypeInfo, bundles: Iterable[str] = ()) -> Query:
    """Seed a query with entity type and, when the type has a bundle key, bundles.

    Args:
        entity_info: Metadata of the entity type to query.
        bundles: Allowed bundles. Empty means every bundle.

    Returns:
        Query scoped to the entity type (and bundle membership).
    """
    bundles = tuple(bundles)
    if bundles and entity_info.bundle_key:
        return Query(entity_info.entity_type, bundles=bundles)
    return Query(entity_info.entity_type)


def add_descriptor_condition(
    query: Query,
    descriptor: FieldDescriptor,
    value: Any,
    operator: Operator,
    entity_info: EntityTypeInfo,
) -> Query:
    """Route a condition to field or property addressing.

    Property conditions use the schema column of the property; field conditions use the
    descriptor's column.

    Raises:
        ValueError: If the descriptor has no storage property.
    """
    if descriptor.storage_property is None:
        raise ValueError(f"Field '{descriptor.public_name}' has no storage property")
    if descriptor.is_field:
        return query.where_field(descriptor.storage_property, descriptor.column, value, operator)
    column = entity_info.column_for(descriptor.storage_property)
    return query.where_property(column, value, operator)


def add_descriptor_ordering(
    query: Query,
    descriptor: FieldDescriptor,
    direction: SortDirection,
    entity_info: EntityTypeInfo,
) -> Query:
    """Route an ordering to field or property addressing."""
    if descriptor.storage_property is None:
        raise ValueError(f"Field '{descriptor.public_name}' has no storage property")
    if descriptor.is_field:
        return query.order_by(
            descriptor.addressing, descriptor.storage_property, descriptor.column, direction
        )
    column = entity_info.column_for(descriptor.storage_property)
    return query.order_by(descriptor.addressing, column, direction=direction)


def validate_filter_targets(filters: Iterable[FilterClause]) -> None:
    """Check that every filter target is a segment-wise prefix of its field path.

    Args:
        filters: Parsed filter clauses.

    Raises:
        ClientError: On the first target that does not prefix its field.
    """
    for clause in filters:
        if not clause.target:
            continue
        field_parts = clause.path
        target_parts = clause.target.split(".")
        if len(target_parts) > len(field_parts) or any(
            part != field_parts[delta] for delta, part in enumerate(target_parts)
        ):
            raise ClientError(
                f'The target "{clause.target}" should be a part of the field name '
                f'"{clause.public_field}".'
            )


def pagination_range(page: int, size: int) -> tuple[int, int]:
    """Translate a 1-based page into a zero-based (offset, count) range.

    Raises:
        ClientError: If page or size is lower than 1.
    """
    if page < 1:
        raise ClientError('"Page" property should be numeric and equal or higher than 1.')
    if size < 1:
        raise ClientError('"Range" property should be numeric and equal or higher than 1.')
    return (page - 1) * size, size


def _comparable(left: Any, right: Any) -> tuple[Any, Any]:
    """Coerce a pair to floats when both are numeric, else to strings."""
    if not isinstance(left, bool) and not isinstance(right, bool):
        try:
            return float(left), float(right)
        except (TypeError, ValueError):
            pass
    return str(left), str(right)


def compare(operator: Operator, candidate: Any, value: Any) -> bool:
    """Evaluate ``candidate <operator> value`` with SQL-like NULL semantics.

    Set operators (IN, NOT IN, BETWEEN) take a sequence as value.

    Args:
        operator: Comparison operator.
        candidate: Stored value.
        value: Condition value (sequence for set operators).

    Returns:
        True if the comparison holds. A None candidate never matches.
    """
    if candidate is None:
        return False
    if operator.takes_value_set():
        values: Sequence[Any] = value if isinstance(value, list | tuple) else (value,)
        if operator is Operator.BETWEEN:
            if len(values) < 2:
                return False
            low, c_low = _comparable(values[0], candidate)
            high, c_high = _comparable(values[1], candidate)
            return low <= c_low and c_high <= high
        found = any(compare(Operator.EQ, candidate, v) for v in values)
        return found if operator is Operator.IN else not found
    if operator is Operator.CONTAINS:
        return str(value) in str(candidate)
    if operator is Operator.STARTS_WITH:
        return str(candidate).startswith(str(value))
    left, right = _comparable(candidate, value)
    match operator:
        case Operator.EQ:
            return left == right
        case Operator.NE:
            return left != right
        case Operator.GT:
            return left > right
        case Operator.GE:
            return left >= right
        case Operator.LT:
            return left < right
        case Operator.LE:
            return left <= right
    raise ValueError(f"Unsupported operator: {operator}")
