"""Query functionality: request clauses, the storage query and query operations."""

from entityprovider.core.query.models import (
    Condition,
    FilterClause,
    Operator,
    Ordering,
    Query,
    QueryRange,
    RelationalHop,
    Relationship,
    SortClause,
    SortDirection,
)
from entityprovider.core.query.operations import (
    add_descriptor_condition,
    add_descriptor_ordering,
    compare,
    pagination_range,
    scope_query,
    validate_filter_targets,
)

__all__ = [
    # Models
    "Query",
    "QueryRange",
    "Condition",
    "Ordering",
    "Relationship",
    "RelationalHop",
    "FilterClause",
    "SortClause",
    "SortDirection",
    "Operator",
    # Operations
    "scope_query",
    "add_descriptor_condition",
    "add_descriptor_ordering",
    "validate_filter_targets",
    "pagination_range",
    "compare",
]
