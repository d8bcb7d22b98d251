"""Field descriptor models.

A resource exposes an entity through public fields. Each public field is described by a
FieldDescriptor that knows where its value lives in storage and who may touch it.

Usage:
    title = FieldDescriptor("title", storage_property="title")
    tags = FieldDescriptor(
        "tags",
        storage_property="field_tags",
        addressing=AddressingKind.FIELD,
        column="target_id",
        multiple=True,
        referenced_resource=ResourceLink("tags"),
    )
    label = FieldDescriptor("label", callback=lambda interpreter: interpreter.entity.bundle)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from entityprovider.provider.interpreter import EntityInterpreter


class AddressingKind(Enum):
    """How a field maps onto storage."""

    PROPERTY = auto()  # Single scalar column on the entity
    FIELD = auto()  # Possibly multi-valued unit, addressed by column


class Operation(Enum):
    """Operations checked by access policies.

    Fields are checked for VIEW and EDIT, entities for VIEW, CREATE, UPDATE and DELETE.
    """

    VIEW = "view"
    EDIT = "edit"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class HttpMethod(Enum):
    """Request method indicator, used only to gate per-field eligibility."""

    GET = "GET"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


ALL_METHODS: frozenset[HttpMethod] = frozenset(HttpMethod)

AccessPolicy: TypeAlias = "Callable[[Operation, EntityInterpreter], bool | None]"
"""Field access callback. None means "no decision", which denies at field level."""


@dataclass(frozen=True, slots=True)
class ResourceLink:
    """Reference to another resource by name and version."""

    name: str
    major_version: int = 1
    minor_version: int = 0

    @property
    def instance_id(self) -> str:
        """Registry key, e.g. ``tags:1.0``."""
        return f"{self.name}:{self.major_version}.{self.minor_version}"


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Public field of a resource.

    Immutable once built; FieldDefinitionRegistry.build() derives copies with resolved
    bundles instead of mutating descriptors.
    """

    public_name: str
    storage_property: str | None = None
    addressing: AddressingKind = AddressingKind.PROPERTY
    column: str = "value"
    """Sub-key inside a FIELD value. Ignored for PROPERTY addressing."""
    computed: bool = False
    """No direct storage backing. Forced on when storage_property is None."""
    multiple: bool = False
    access_policy: AccessPolicy | None = None
    referenced_resource: ResourceLink | None = None
    referenced_id_property: str | None = None
    """Alternate identifier property on the referenced entity."""
    bundles: tuple[str, ...] = ()
    methods: frozenset[HttpMethod] = ALL_METHODS
    callback: Callable[[EntityInterpreter], Any] | None = None
    preprocess: Callable[[Any], Any] | None = None
    process: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        if self.storage_property is None and not self.computed:
            object.__setattr__(self, "computed", True)
        if not isinstance(self.bundles, tuple):
            object.__setattr__(self, "bundles", tuple(self.bundles))
        if not isinstance(self.methods, frozenset):
            object.__setattr__(self, "methods", frozenset(self.methods))

    @property
    def is_field(self) -> bool:
        return self.addressing is AddressingKind.FIELD

    def with_bundles(self, bundles: tuple[str, ...]) -> FieldDescriptor:
        """Copy of this descriptor restricted to bundles."""
        return replace(self, bundles=tuple(bundles))

    def value(self, interpreter: EntityInterpreter) -> Any:
        """Read the public value of this field from an entity.

        Args:
            interpreter: Wrapped entity to read from.

        Returns:
            The rendered value, or None for computed fields without a callback.
        """
        if self.callback is not None:
            value = self.callback(interpreter)
        elif self.storage_property is None:
            return None
        elif self.is_field:
            value = interpreter.field_value(self.storage_property, self.column, self.multiple)
        else:
            value = interpreter.property_value(self.storage_property)
        if self.process is not None and value is not None:
            value = self.process(value)
        return value

    def set(self, value: Any, interpreter: EntityInterpreter) -> None:
        """Write a value through to storage. None clears the field."""
        if self.storage_property is None:
            raise TypeError(f"Field '{self.public_name}' has no storage property to write")
        if self.is_field:
            interpreter.set_field_value(self.storage_property, self.column, value)
        else:
            interpreter.set_property_value(self.storage_property, value)

    def access(self, op: Operation, interpreter: EntityInterpreter) -> bool:
        """Apply the field's own policy. Bundle and method checks live in AccessGuard."""
        if self.access_policy is None:
            return True
        return self.access_policy(op, interpreter) is True
