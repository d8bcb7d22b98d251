"""Query models: request-side clauses and the storage query.

Usage:
    # Request side, in public field names
    FilterClause("status", operators=(Operator.EQ,), values=("published",))
    FilterClause("tags", operators=(Operator.IN,), values=("1", "2"))
    SortClause("title", SortDirection.DESC)

    # Storage side, immutable - each method returns a new Query instance
    query = (
        Query("node", bundles=("article",))
        .where_property("status", "published")
        .where_field("field_tags", "target_id", ("1", "2"), Operator.IN)
        .order_by(AddressingKind.PROPERTY, "title", direction=SortDirection.DESC)
        .with_range(0, 10)
    )
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from entityprovider.core.field import AddressingKind


class Operator(Enum):
    """Comparison operators accepted in filters."""

    EQ = "="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    IN = "IN"
    NOT_IN = "NOT IN"
    BETWEEN = "BETWEEN"
    CONTAINS = "CONTAINS"
    STARTS_WITH = "STARTS_WITH"

    @classmethod
    def parse(cls, raw: str) -> Operator:
        """Parse an operator string, case-insensitively.

        Raises:
            ValueError: If the operator is not supported.
        """
        normalized = " ".join(raw.strip().upper().split())
        if normalized == "<>":
            return cls.NE
        return cls(normalized)

    def takes_value_set(self) -> bool:
        """Check if the operator compares against the whole value set at once."""
        return self in (Operator.IN, Operator.NOT_IN, Operator.BETWEEN)


class SortDirection(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True, slots=True)
class FilterClause:
    """One filter from the request, in public field names.

    Operators align with values one to one, except when the first operator takes the
    whole value set (IN, NOT IN, BETWEEN).
    """

    public_field: str
    operators: tuple[Operator, ...] = (Operator.EQ,)
    values: tuple[str, ...] = ()
    conjunction: str = "AND"
    target: str | None = None
    """Nested resource this filter is aimed at. Must prefix public_field."""

    def __post_init__(self) -> None:
        if not self.operators:
            raise ValueError(f"Filter on {self.public_field!r} has no operator")

    @property
    def path(self) -> tuple[str, ...]:
        return tuple(self.public_field.split("."))

    def is_nested(self) -> bool:
        return "." in self.public_field


@dataclass(frozen=True, slots=True)
class SortClause:
    public_field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True, slots=True)
class Condition:
    """Property or field condition, in storage names."""

    kind: AddressingKind
    name: str
    value: Any
    operator: Operator = Operator.EQ
    column: str | None = None


@dataclass(frozen=True, slots=True)
class RelationalHop:
    """One hop of a cross-resource path.

    Every hop but the last references entities of entity_type (restricted to bundles).
    The last hop names the compared value and has no entity_type.
    """

    name: str
    kind: AddressingKind
    column: str | None = None
    entity_type: str | None = None
    bundles: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Relationship:
    """Nested filter attached to a query, interpreted by the store as a join."""

    public_field: str
    hops: tuple[RelationalHop, ...]
    operators: tuple[Operator, ...]
    values: tuple[Any, ...]
    conjunction: str = "AND"


@dataclass(frozen=True, slots=True)
class Ordering:
    kind: AddressingKind
    name: str
    column: str | None = None
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True, slots=True)
class QueryRange:
    offset: int
    count: int


@dataclass(frozen=True, slots=True)
class Query:
    """Storage query built fresh per request.

    Immutable - each method returns a new Query instance.
    """

    entity_type: str
    bundles: tuple[str, ...] = ()
    """Bundle membership restriction. Empty means every bundle."""
    conditions: tuple[Condition, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    order: tuple[Ordering, ...] = ()
    range: QueryRange | None = None
    tags: frozenset[str] = frozenset()
    metadata: tuple[tuple[str, Any], ...] = ()

    def where_property(self, column: str, value: Any, operator: Operator = Operator.EQ) -> Query:
        """Entities whose property column compares true against value."""
        condition = Condition(AddressingKind.PROPERTY, column, value, operator)
        return replace(self, conditions=(*self.conditions, condition))

    def where_field(
        self, name: str, column: str, value: Any, operator: Operator = Operator.EQ
    ) -> Query:
        """Entities with at least one field value whose column compares true."""
        condition = Condition(AddressingKind.FIELD, name, value, operator, column)
        return replace(self, conditions=(*self.conditions, condition))

    def with_relationship(self, relationship: Relationship) -> Query:
        return replace(self, relationships=(*self.relationships, relationship))

    def order_by(
        self,
        kind: AddressingKind,
        name: str,
        column: str | None = None,
        direction: SortDirection = SortDirection.ASC,
    ) -> Query:
        ordering = Ordering(kind, name, column, direction)
        return replace(self, order=(*self.order, ordering))

    def with_range(self, offset: int, count: int) -> Query:
        return replace(self, range=QueryRange(offset, count))

    def tagged(self, tag: str) -> Query:
        return replace(self, tags=self.tags | {tag})

    def with_metadata(self, key: str, value: Any) -> Query:
        return replace(self, metadata=(*self.metadata, (key, value)))

    @property
    def field_conditions(self) -> tuple[Condition, ...]:
        return tuple(c for c in self.conditions if c.kind is AddressingKind.FIELD)

    @property
    def property_conditions(self) -> tuple[Condition, ...]:
        return tuple(c for c in self.conditions if c.kind is AddressingKind.PROPERTY)

    def meta(self, key: str) -> Any:
        """Last metadata value stored under key, or None."""
        for k, value in reversed(self.metadata):
            if k == key:
                return value
        return None
