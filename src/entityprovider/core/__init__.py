"""Core functionalities: stateless models, errors and pure query operations.

Architecture Note:
    core/ contains pure, stateless building blocks with no runtime state mutation.
    For the store see storage/, for request handling see provider/.
"""

from entityprovider.core.entity import EntityTypeInfo, StoredEntity
from entityprovider.core.errors import (
    ClientError,
    EntityValidationError,
    PermissionDeniedError,
    ProviderError,
    ServerConfigurationError,
    UnprocessableError,
    UnsupportedFieldError,
)
from entityprovider.core.field import (
    ALL_METHODS,
    AccessPolicy,
    AddressingKind,
    FieldDefinitionRegistry,
    FieldDescriptor,
    HttpMethod,
    Operation,
    ResourceLink,
)
from entityprovider.core.query import (
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
    add_descriptor_condition,
    add_descriptor_ordering,
    compare,
    pagination_range,
    scope_query,
    validate_filter_targets,
)
from entityprovider.core.types import Account, EntityKey

__all__ = [
    # Types
    "Account",
    "EntityKey",
    # Entity
    "EntityTypeInfo",
    "StoredEntity",
    # Errors
    "ProviderError",
    "ClientError",
    "UnsupportedFieldError",
    "EntityValidationError",
    "UnprocessableError",
    "PermissionDeniedError",
    "ServerConfigurationError",
    # Field
    "FieldDescriptor",
    "FieldDefinitionRegistry",
    "AddressingKind",
    "AccessPolicy",
    "Operation",
    "HttpMethod",
    "ALL_METHODS",
    "ResourceLink",
    # Query
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
    "scope_query",
    "add_descriptor_condition",
    "add_descriptor_ordering",
    "validate_filter_targets",
    "pagination_range",
    "compare",
]
