"""Entity records and entity type metadata.

Usage:
    info = EntityTypeInfo(
        "node",
        bundle_key="type",
        bundles=("article", "page"),
        property_columns={"author": "uid"},
        url_template="/node/{id}",
    )
    entity = StoredEntity("node", bundle="article", properties={"title": "Hello"})
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class EntityTypeInfo:
    """Storage metadata for an entity type."""

    entity_type: str
    id_key: str = "id"
    bundle_key: str | None = None
    """Column holding the bundle. None when the type is not partitioned."""
    bundles: tuple[str, ...] = ()
    property_columns: Mapping[str, str] = field(default_factory=dict)
    """Property name -> schema column, for properties whose column has another name."""
    url_template: str | None = None

    def column_for(self, property_name: str) -> str:
        """Schema column backing a property (e.g. ``author`` -> ``uid``)."""
        return self.property_columns.get(property_name, property_name)


@dataclass(slots=True)
class StoredEntity:
    """One loaded (or not yet saved) entity.

    Properties are keyed by schema column. Field values are lists of deltas, each delta
    a mapping of column -> value.
    """

    entity_type: str
    bundle: str | None = None
    id: int | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    fields: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    @property
    def is_new(self) -> bool:
        return self.id is None
