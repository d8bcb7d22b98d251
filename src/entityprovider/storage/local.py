"""Local in-memory entity store implementation.

Simple dict-based store suitable for single-process use and testing.
Every query is an O(n) scan over the entities of one type.

Usage:
    store = LocalEntityStore()
    store.register_type(EntityTypeInfo("node", bundle_key="type", bundles=("article",)))
    store.insert("node", bundle="article", properties={"title": "Hello"})
    store.execute(Query("node").where_property("title", "Hello"))
"""

from __future__ import annotations

import copy as cp
from collections.abc import Iterator, Mapping
from typing import Any

from entityprovider.core.entity import EntityTypeInfo, StoredEntity
from entityprovider.core.field import AddressingKind
from entityprovider.core.query import (
    Condition,
    Operator,
    Ordering,
    Query,
    RelationalHop,
    Relationship,
    SortDirection,
    compare,
)
from entityprovider.core.types import EntityKey
from entityprovider.storage.allocator import IdAllocator


class LocalEntityStore:
    """In-memory store using nested dicts.

    Structure:
        _entities[entity_type][entity_id] = StoredEntity

    Loaded entities are copies: changes persist only through save().
    Tags and metadata are not interpreted; the last executed query is kept in
    ``last_query`` for inspection.
    """

    def __init__(self, *infos: EntityTypeInfo):
        """Initialize local store.

        Args:
            *infos: Entity types to register up front.
        """
        self._info: dict[str, EntityTypeInfo] = {}
        self._entities: dict[str, dict[int, StoredEntity]] = {}
        self._allocator = IdAllocator()
        self.last_query: Query | None = None
        self.executed: list[Query] = []
        for info in infos:
            self.register_type(info)

    def register_type(self, info: EntityTypeInfo) -> None:
        """Register (or replace) an entity type."""
        self._info[info.entity_type] = info
        self._entities.setdefault(info.entity_type, {})

    def entity_info(self, entity_type: str) -> EntityTypeInfo:
        """Metadata of an entity type.

        Raises:
            KeyError: If the entity type is not registered.
        """
        try:
            return self._info[entity_type]
        except KeyError:
            raise KeyError(f"Unknown entity type '{entity_type}'") from None

    def insert(
        self,
        entity_type: str,
        bundle: str | None = None,
        properties: Mapping[str, Any] | None = None,
        fields: Mapping[str, list[dict[str, Any]]] | None = None,
        entity_id: int | None = None,
    ) -> StoredEntity:
        """Create and save an entity in one step. Convenience for seeding data.

        Args:
            entity_type: Registered entity type.
            bundle: Bundle of the new entity.
            properties: Column -> value.
            fields: Field name -> list of deltas.
            entity_id: Explicit id (default: next in sequence).

        Returns:
            Copy of the saved entity.
        """
        entity = StoredEntity(
            entity_type,
            bundle=bundle,
            id=entity_id,
            properties=dict(properties or {}),
            fields={name: [dict(d) for d in deltas] for name, deltas in (fields or {}).items()},
        )
        if entity_id is not None:
            self._allocator.observe(entity_type, entity_id)
        self.save(entity)
        return cp.deepcopy(entity)

    def load(self, entity_type: str, entity_id: EntityKey) -> StoredEntity | None:
        key = self._normalize_id(entity_id)
        if key is None:
            return None
        entity = self._entities.get(entity_type, {}).get(key)
        return cp.deepcopy(entity) if entity is not None else None

    def create(self, entity_type: str, bundle: str | None = None) -> StoredEntity:
        self.entity_info(entity_type)
        return StoredEntity(entity_type, bundle=bundle)

    def save(self, entity: StoredEntity) -> int:
        """Persist entity, allocating an id for new ones.

        Args:
            entity: Entity to store. Its id is set in place when new.

        Returns:
            Canonical id of the saved entity.
        """
        self.entity_info(entity.entity_type)
        if entity.id is None:
            entity.id = self._allocator.allocate(entity.entity_type)
        self._entities[entity.entity_type][entity.id] = cp.deepcopy(entity)
        return entity.id

    def delete(self, entity_type: str, entity_id: EntityKey) -> bool:
        key = self._normalize_id(entity_id)
        if key is None:
            return False
        return self._entities.get(entity_type, {}).pop(key, None) is not None

    def bundle_of(self, entity: StoredEntity) -> str | None:
        return entity.bundle

    def entity_url(self, entity: StoredEntity) -> str | None:
        info = self.entity_info(entity.entity_type)
        if not info.url_template or entity.id is None:
            return None
        return info.url_template.format(id=entity.id, bundle=entity.bundle)

    def execute(self, query: Query) -> list[int]:
        """Run query and return matching ids.

        Args:
            query: Query to execute.

        Returns:
            Ids in query order, sliced by the query range.
        """
        self._record(query)
        matched = self._sort(list(self._matching(query)), query.order)
        if query.range is not None:
            start = query.range.offset
            matched = matched[start : start + query.range.count]
        return [entity.id for entity in matched if entity.id is not None]

    def count(self, query: Query) -> int:
        self._record(query)
        return sum(1 for _ in self._matching(query))

    def _record(self, query: Query) -> None:
        self.last_query = query
        self.executed.append(query)

    @staticmethod
    def _normalize_id(entity_id: EntityKey) -> int | None:
        if isinstance(entity_id, bool):
            return None
        if isinstance(entity_id, int):
            return entity_id
        try:
            return int(str(entity_id).strip())
        except ValueError:
            return None

    def _matching(self, query: Query) -> Iterator[StoredEntity]:
        info = self.entity_info(query.entity_type)
        for entity in self._entities[query.entity_type].values():
            if query.bundles and entity.bundle not in query.bundles:
                continue
            if not all(self._condition_holds(entity, info, c) for c in query.conditions):
                continue
            if not all(self._relationship_holds(entity, info, r) for r in query.relationships):
                continue
            yield entity

    @staticmethod
    def _property_value(entity: StoredEntity, info: EntityTypeInfo, column: str) -> Any:
        if column == info.id_key:
            return entity.id
        if info.bundle_key is not None and column == info.bundle_key:
            return entity.bundle
        return entity.properties.get(column)

    def _values(
        self,
        entity: StoredEntity,
        info: EntityTypeInfo,
        kind: AddressingKind,
        name: str,
        column: str | None,
    ) -> list[Any]:
        """All stored values addressed by (kind, name, column) on entity."""
        if kind is AddressingKind.FIELD:
            return [delta.get(column or "value") for delta in entity.fields.get(name, [])]
        return [self._property_value(entity, info, name)]

    def _condition_holds(
        self, entity: StoredEntity, info: EntityTypeInfo, condition: Condition
    ) -> bool:
        values = self._values(entity, info, condition.kind, condition.name, condition.column)
        if condition.operator is Operator.NOT_IN and condition.kind is AddressingKind.FIELD:
            # No delta may hold an excluded value.
            present = [v for v in values if v is not None]
            return bool(present) and all(
                compare(Operator.NOT_IN, v, condition.value) for v in present
            )
        return any(compare(condition.operator, v, condition.value) for v in values)

    def _relationship_holds(
        self, entity: StoredEntity, info: EntityTypeInfo, relationship: Relationship
    ) -> bool:
        current: list[tuple[StoredEntity, EntityTypeInfo]] = [(entity, info)]
        *joins, last = relationship.hops
        for hop in joins:
            current = self._follow(current, hop)
            if not current:
                return False
        checks = self._relationship_checks(relationship)
        per_candidate = [
            self._values(candidate, candidate_info, last.kind, last.name, last.column)
            for candidate, candidate_info in current
        ]
        excluded = [value for op, value in checks if op is Operator.NOT_IN]
        if excluded:
            # No followed value may be excluded, same as a direct field condition.
            present = [v for values in per_candidate for v in values if v is not None]
            if not present or not all(
                compare(Operator.NOT_IN, v, value) for v in present for value in excluded
            ):
                return False
        checks = [(op, value) for op, value in checks if op is not Operator.NOT_IN]
        if not checks:
            return True
        return any(
            all(any(compare(op, v, value) for v in values) for op, value in checks)
            for values in per_candidate
        )

    def _follow(
        self, current: list[tuple[StoredEntity, EntityTypeInfo]], hop: RelationalHop
    ) -> list[tuple[StoredEntity, EntityTypeInfo]]:
        """Entities referenced through hop from any entity in current."""
        if hop.entity_type is None:
            return []
        target_info = self.entity_info(hop.entity_type)
        store = self._entities[hop.entity_type]
        followed: dict[int, StoredEntity] = {}
        for entity, entity_info in current:
            for ref in self._values(entity, entity_info, hop.kind, hop.name, hop.column):
                key = self._normalize_id(ref) if ref is not None else None
                target = store.get(key) if key is not None else None
                if target is None or (hop.bundles and target.bundle not in hop.bundles):
                    continue
                followed[key] = target
        return [(target, target_info) for target in followed.values()]

    @staticmethod
    def _relationship_checks(relationship: Relationship) -> list[tuple[Operator, Any]]:
        operators = relationship.operators or (Operator.EQ,)
        if operators[0].takes_value_set():
            return [(operators[0], tuple(relationship.values))]
        return list(zip(operators, relationship.values, strict=False))

    def _sort(
        self, entities: list[StoredEntity], order: tuple[Ordering, ...]
    ) -> list[StoredEntity]:
        """Stable multi-key sort; NULL values sort first ascending."""
        if not order:
            return sorted(entities, key=lambda e: e.id or 0)
        if not entities:
            return []
        info = self.entity_info(entities[0].entity_type)
        result = list(entities)
        for ordering in reversed(order):

            def key(entity: StoredEntity, ordering: Ordering = ordering) -> tuple[int, Any]:
                values = self._values(entity, info, ordering.kind, ordering.name, ordering.column)
                return _sort_key(values[0] if values else None)

            result.sort(key=key, reverse=ordering.direction is SortDirection.DESC)
        return result


def _sort_key(value: Any) -> tuple[int, Any]:
    if value is None:
        return (0, 0)
    if isinstance(value, int | float) and not isinstance(value, bool):
        return (1, value)
    try:
        return (1, float(value))
    except (TypeError, ValueError):
        return (2, str(value))
