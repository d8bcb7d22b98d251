"""Writing request payloads onto entities, and save-time validation.

Usage:
    setter = PropertySetter(resource, guard)
    setter.apply(interpreter, {"title": "Hello"}, HttpMethod.PATCH, replace=False)

    class TitleRequired:
        def validate(self, entity):
            if not entity.properties.get("title"):
                return {"title": ["{field} is required."]}
            return {}
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from entityprovider.core.entity import StoredEntity
from entityprovider.core.errors import ClientError, EntityValidationError
from entityprovider.core.field import FieldDefinitionRegistry, HttpMethod, Operation
from entityprovider.observability import get_logger
from entityprovider.provider.access import AccessGuard
from entityprovider.provider.interpreter import EntityInterpreter
from entityprovider.provider.resources import Resource

logger = get_logger(__name__)


class EntityValidator(Protocol):
    """Save-time entity validation.

    Returns messages keyed by storage property; empty when the entity is valid.
    Messages may contain a ``{field}`` placeholder for the public field name.
    """

    def validate(self, entity: StoredEntity) -> Mapping[str, Sequence[str]]: ...


class PropertySetter:
    """Applies a payload to an entity field by field, in declaration order.

    Args:
        resource: Resource whose fields are written.
        guard: Access checks for method eligibility and field edit access.
        id_public_name: Payload key of the canonical id, which is never writable.
    """

    def __init__(self, resource: Resource, guard: AccessGuard, id_public_name: str = "id"):
        self._resource = resource
        self._guard = guard
        self._id_public_name = id_public_name

    def apply(
        self,
        interpreter: EntityInterpreter,
        payload: Any,
        method: HttpMethod,
        replace: bool = False,
    ) -> None:
        """Write payload values through field setters.

        Fields that do not apply to the method, and computed fields, are skipped and
        their payload keys excused. With replace, omitted editable fields are cleared
        unless another field already wrote the same storage property.

        Args:
            interpreter: Entity to write to.
            payload: Public field name -> value.
            method: Request method, gates per-field eligibility.
            replace: Clear fields missing from the payload.

        Raises:
            ClientError: If the payload is not a mapping, sets a field without edit
                access, carries unknown keys, or writes nothing.
        """
        if not isinstance(payload, Mapping):
            raise ClientError(
                "Bad input data provided. Please, check your input and your Content-Type header."
            )
        payload = {k: v for k, v in payload.items() if k != self._id_public_name}
        unconsumed = dict(payload)
        processed: list[str] = []
        written = False

        for descriptor in self._resource.fields:
            name = descriptor.public_name
            if not self._guard.method_access(descriptor, method) or descriptor.computed:
                unconsumed.pop(name, None)
                continue

            can_edit = self._guard.field_access(descriptor, Operation.EDIT, interpreter)
            if name not in payload:
                # Two public fields may share a property; the first writer wins.
                if replace and can_edit and descriptor.storage_property not in processed:
                    descriptor.set(None, interpreter)
                continue
            if not can_edit:
                raise ClientError(f"Property {name} cannot be set.")

            value = payload[name]
            if descriptor.preprocess is not None and value is not None:
                value = descriptor.preprocess(value)
            descriptor.set(value, interpreter)
            if descriptor.storage_property is not None:
                processed.append(descriptor.storage_property)
            unconsumed.pop(name, None)
            written = True

        if unconsumed:
            names = ", ".join(unconsumed)
            if len(unconsumed) == 1:
                raise ClientError(f"Property {names} is invalid.")
            raise ClientError(f"Properties {names} are invalid.")
        if not written:
            raise ClientError("No values were sent with the request")

        logger.debug(
            "properties_set",
            resource=self._resource.name,
            entity_id=interpreter.id,
            properties=processed,
            replace=replace,
        )


def raise_for_validation_errors(
    errors: Mapping[str, Sequence[str]], fields: FieldDefinitionRegistry
) -> None:
    """Map storage-level validation errors back to public fields and raise.

    Args:
        errors: Storage property -> messages.
        fields: Registry used to find public names.

    Raises:
        EntityValidationError: If some failing property is exposed publicly.
        ClientError: If no failing property is exposed.
    """
    failing = {prop: list(messages) for prop, messages in errors.items() if messages}
    if not failing:
        return

    public_names: dict[str, str] = {}
    for prop in failing:
        public_name = fields.public_name_for_property(prop)
        if public_name is not None:
            public_names[prop] = public_name

    if not public_names:
        logger.info("validation_failed_on_private_properties", properties=list(failing))
        raise ClientError("Invalid value(s) sent with the request.")

    names = list(public_names.values())
    if len(names) == 1:
        message = f"Invalid value in field {names[0]}."
    else:
        message = f"Invalid values in fields {','.join(names)}."
    error = EntityValidationError(message)
    for prop, messages in failing.items():
        public_name = public_names.get(prop)
        if public_name is None:
            continue
        for text in messages:
            error.add_field_error(public_name, text.replace("{field}", public_name))
    raise error
