"""EntityProvider: generic data access over stored entities for REST-style resources.

Usage:
    from entityprovider import (
        EntityDataProvider,
        EntityTypeInfo,
        FieldDescriptor,
        LocalEntityStore,
        RequestContext,
        ResourceDefinition,
        ResourceRegistry,
    )

    store = LocalEntityStore(EntityTypeInfo("node", bundle_key="type", bundles=("article",)))
    resources = ResourceRegistry(store)
    articles = ResourceDefinition(
        name="articles",
        entity_type="node",
        bundles=("article",),
        fields=(
            FieldDescriptor("id", storage_property="id"),
            FieldDescriptor("title", storage_property="title"),
        ),
    )
    provider = EntityDataProvider(articles, store, resources=resources)

    request = RequestContext.from_params({"sort": "-title", "range": "10"})
    rows = provider.list(request)
"""

__version__ = "0.1.0"

# Configuration
from entityprovider.config import ProviderSettings

# Core primitives
from entityprovider.core import (
    AddressingKind,
    ClientError,
    EntityTypeInfo,
    EntityValidationError,
    FieldDefinitionRegistry,
    FieldDescriptor,
    FilterClause,
    HttpMethod,
    Operation,
    Operator,
    PermissionDeniedError,
    ProviderError,
    Query,
    ResourceLink,
    ServerConfigurationError,
    SortClause,
    SortDirection,
    StoredEntity,
    UnprocessableError,
    UnsupportedFieldError,
)

# Observability
from entityprovider.observability import configure_logging, get_logger

# Provider
from entityprovider.provider import (
    AccessGuard,
    EntityDataProvider,
    EntityInterpreter,
    FieldCollection,
    RequestContext,
    Resource,
    ResourceDefinition,
    ResourceRegistry,
    WriteResult,
)

# Storage
from entityprovider.storage import (
    EntityStore,
    LocalEntityStore,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "EntityTypeInfo",
    "StoredEntity",
    "FieldDescriptor",
    "FieldDefinitionRegistry",
    "AddressingKind",
    "Operation",
    "HttpMethod",
    "ResourceLink",
    "Query",
    "FilterClause",
    "SortClause",
    "SortDirection",
    "Operator",
    # Errors
    "ProviderError",
    "ClientError",
    "UnsupportedFieldError",
    "EntityValidationError",
    "UnprocessableError",
    "PermissionDeniedError",
    "ServerConfigurationError",
    # Provider
    "EntityDataProvider",
    "WriteResult",
    "ResourceDefinition",
    "Resource",
    "ResourceRegistry",
    "RequestContext",
    "AccessGuard",
    "EntityInterpreter",
    "FieldCollection",
    # Storage
    "EntityStore",
    "LocalEntityStore",
    # Config and observability
    "ProviderSettings",
    "configure_logging",
    "get_logger",
]
