"""Field functionality: descriptors and the per-resource registry."""

from entityprovider.core.field.models import (
    ALL_METHODS,
    AccessPolicy,
    AddressingKind,
    FieldDescriptor,
    HttpMethod,
    Operation,
    ResourceLink,
)
from entityprovider.core.field.registry import FieldDefinitionRegistry

__all__ = [
    # Models
    "FieldDescriptor",
    "AddressingKind",
    "Operation",
    "HttpMethod",
    "ALL_METHODS",
    "AccessPolicy",
    "ResourceLink",
    # Registry
    "FieldDefinitionRegistry",
]
