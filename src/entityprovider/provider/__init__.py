"""Request handling: resources, request parsing, access checks and the data provider.

Architecture Note:
    Resources and their field registries are built once and only read afterwards.
    Every per-request value lives in RequestContext, passed explicitly into each call.
"""

from entityprovider.provider.access import AccessDecision, AccessGuard, EntityAccessCallback
from entityprovider.provider.builder import DEFAULT_SORT, QueryBuilder
from entityprovider.provider.ids import IdResolver
from entityprovider.provider.interpreter import EntityInterpreter, FieldCollection
from entityprovider.provider.properties import (
    EntityValidator,
    PropertySetter,
    raise_for_validation_errors,
)
from entityprovider.provider.provider import EntityDataProvider, WriteResult
from entityprovider.provider.relational import RelationalFilterResolver
from entityprovider.provider.request import RequestContext, parse_filters, parse_sort
from entityprovider.provider.resources import Resource, ResourceDefinition, ResourceRegistry

__all__ = [
    # Provider
    "EntityDataProvider",
    "WriteResult",
    # Resources
    "ResourceDefinition",
    "Resource",
    "ResourceRegistry",
    # Request
    "RequestContext",
    "parse_filters",
    "parse_sort",
    # Access
    "AccessGuard",
    "AccessDecision",
    "EntityAccessCallback",
    # Entities
    "EntityInterpreter",
    "FieldCollection",
    # Building blocks
    "QueryBuilder",
    "DEFAULT_SORT",
    "IdResolver",
    "RelationalFilterResolver",
    "PropertySetter",
    "EntityValidator",
    "raise_for_validation_errors",
]
