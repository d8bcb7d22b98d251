"""Entity interpreter and field-limited entity views.

Usage:
    interpreter = EntityInterpreter(account, entity, store)
    interpreter.property_value("author")  # reads the "uid" column
    interpreter.set_field_value("field_tags", "target_id", [1, 2])

    view = FieldCollection(interpreter, id_field=registry.get("id"))
    view.set(registry.get("title"))
    view.to_dict()  # {"title": "Hello"}
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from entityprovider.core.entity import EntityTypeInfo, StoredEntity
from entityprovider.core.field import FieldDescriptor
from entityprovider.core.types import Account
from entityprovider.storage import EntityStore


class EntityInterpreter:
    """Uniform value accessor over one stored entity, bound to an account.

    Wraps exactly one entity for the duration of one operation. Property names are
    translated to schema columns through the entity type's metadata.

    Args:
        account: Account the operation runs as.
        entity: Entity to wrap (loaded or new).
        store: Store the entity belongs to.
    """

    def __init__(self, account: Account, entity: StoredEntity, store: EntityStore):
        self._account = account
        self._entity = entity
        self._store = store
        self._info: EntityTypeInfo = store.entity_info(entity.entity_type)

    @property
    def account(self) -> Account:
        return self._account

    @property
    def entity(self) -> StoredEntity:
        return self._entity

    @property
    def entity_type(self) -> str:
        return self._entity.entity_type

    @property
    def id(self) -> int | None:
        return self._entity.id

    @property
    def bundle(self) -> str | None:
        return self._store.bundle_of(self._entity)

    @property
    def url(self) -> str | None:
        """Canonical URL of the entity, if its type exposes one."""
        return self._store.entity_url(self._entity)

    def property_value(self, name: str) -> Any:
        column = self._info.column_for(name)
        if column == self._info.id_key:
            return self._entity.id
        if self._info.bundle_key is not None and column == self._info.bundle_key:
            return self._entity.bundle
        return self._entity.properties.get(column)

    def set_property_value(self, name: str, value: Any) -> None:
        """Write a property. The id column is owned by the store and never written."""
        column = self._info.column_for(name)
        if column == self._info.id_key:
            return
        if self._info.bundle_key is not None and column == self._info.bundle_key:
            self._entity.bundle = value
            return
        self._entity.properties[column] = value

    def field_value(self, name: str, column: str, multiple: bool = False) -> Any:
        """Read one column of a field.

        Args:
            name: Field name.
            column: Column inside each delta.
            multiple: Return every delta's value instead of the first.

        Returns:
            List of values when multiple, else the first value or None.
        """
        values = [delta.get(column) for delta in self._entity.fields.get(name, [])]
        if multiple:
            return values
        return values[0] if values else None

    def set_field_value(self, name: str, column: str, value: Any) -> None:
        """Write one column of a field. None empties the field.

        Other columns of existing deltas are kept so that several public fields can
        address columns of the same field.
        """
        if value is None:
            self._entity.fields[name] = []
            return
        values = list(value) if isinstance(value, list | tuple) else [value]
        deltas = self._entity.fields.get(name, [])
        updated: list[dict[str, Any]] = []
        for delta, item in enumerate(values):
            current = dict(deltas[delta]) if delta < len(deltas) else {}
            current[column] = item
            updated.append(current)
        self._entity.fields[name] = updated


class FieldCollection(Mapping[str, FieldDescriptor]):
    """Field-limited, access-filtered projection of one entity.

    Values are read lazily through the interpreter.

    Args:
        interpreter: Wrapped entity.
        id_field: Descriptor rendering the public id (default: canonical id).
    """

    def __init__(self, interpreter: EntityInterpreter, id_field: FieldDescriptor | None = None):
        self._interpreter = interpreter
        self._id_field = id_field
        self._fields: dict[str, FieldDescriptor] = {}

    @property
    def interpreter(self) -> EntityInterpreter:
        return self._interpreter

    @property
    def id(self) -> Any:
        """Public identifier of the entity."""
        if self._id_field is not None:
            return self._id_field.value(self._interpreter)
        return self._interpreter.id

    def set(self, descriptor: FieldDescriptor) -> None:
        self._fields[descriptor.public_name] = descriptor

    def value(self, public_name: str) -> Any:
        return self._fields[public_name].value(self._interpreter)

    def to_dict(self) -> dict[str, Any]:
        """Render every exposed field, in declaration order."""
        return {name: d.value(self._interpreter) for name, d in self._fields.items()}

    def __getitem__(self, public_name: str) -> FieldDescriptor:
        return self._fields[public_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        interpreter = self._interpreter
        return f"FieldCollection({interpreter.entity_type}:{interpreter.id}, {list(self._fields)})"
