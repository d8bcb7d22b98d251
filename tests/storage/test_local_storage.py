"""Unit tests for LocalEntityStore query execution and persistence."""

import pytest

from entityprovider.core.entity import EntityTypeInfo, StoredEntity
from entityprovider.core.field import AddressingKind
from entityprovider.core.query import Operator, Query, RelationalHop, Relationship, SortDirection
from entityprovider.storage import IdAllocator, LocalEntityStore


def test_allocator_sequences_are_per_type():
    allocator = IdAllocator()

    assert allocator.allocate("node") == 1
    assert allocator.allocate("node") == 2
    assert allocator.allocate("user") == 1


def test_allocator_observe_skips_taken_ids():
    allocator = IdAllocator()
    allocator.observe("node", 10)

    assert allocator.allocate("node") == 11
    allocator.observe("node", 3)
    assert allocator.allocate("node") == 12


def test_entity_info_unknown_type_raises_key_error():
    with pytest.raises(KeyError):
        LocalEntityStore().entity_info("node")


def test_load_returns_copies(store):
    """Changes to a loaded entity persist only through save()."""
    entity = store.load("node", 1)
    entity.properties["title"] = "Changed"

    assert store.load("node", 1).properties["title"] == "Alpha"

    store.save(entity)
    assert store.load("node", 1).properties["title"] == "Changed"


def test_load_accepts_string_ids(store):
    assert store.load("node", "2").id == 2
    assert store.load("node", "not-a-number") is None
    assert store.load("node", 99) is None


def test_create_is_not_persisted_until_saved(store):
    entity = store.create("node", "article")

    assert entity.is_new
    assert store.count(Query("node")) == 6

    entity_id = store.save(entity)
    assert entity_id == 7
    assert entity.id == 7
    assert store.count(Query("node")) == 7


def test_delete(store):
    assert store.delete("node", 3) is True
    assert store.load("node", 3) is None
    assert store.delete("node", 3) is False


def test_entity_url(store):
    assert store.entity_url(store.load("node", 2)) == "/node/2"
    assert store.entity_url(store.load("taxonomy_term", 1)) is None
    assert store.entity_url(StoredEntity("node")) is None


def test_bundle_membership(store):
    ids = store.execute(Query("node", bundles=("page",)))

    assert ids == [4]


def test_property_conditions(store):
    query = Query("node").where_property("status", "published")

    assert store.execute(query) == [1, 2, 4, 6]


def test_id_and_bundle_columns_are_queryable(store):
    assert store.execute(Query("node").where_property("nid", "3")) == [3]
    assert store.execute(Query("node").where_property("type", "page")) == [4]


def test_field_conditions_match_any_delta(store):
    query = Query("node").where_field("field_tags", "target_id", "3")

    assert store.execute(query) == [2, 3]


def test_field_in_condition(store):
    query = Query("node").where_field("field_tags", "target_id", ("1", "2"), Operator.IN)

    assert store.execute(query) == [1, 2, 5]


def test_field_not_in_requires_every_delta_outside(store):
    """NOT IN on a multi-valued field excludes entities holding any excluded value."""
    query = Query("node").where_field("field_tags", "target_id", ("3",), Operator.NOT_IN)

    assert store.execute(query) == [1, 5]


def test_ordering_and_range(store):
    query = (
        Query("node", bundles=("article",))
        .order_by(AddressingKind.PROPERTY, "title", direction=SortDirection.DESC)
        .with_range(1, 2)
    )

    assert store.execute(query) == [5, 3]


def test_ordering_is_stable_across_keys(store):
    query = (
        Query("node")
        .order_by(AddressingKind.PROPERTY, "uid")
        .order_by(AddressingKind.PROPERTY, "title", direction=SortDirection.DESC)
    )

    assert store.execute(query) == [3, 1, 4, 6, 5, 2]


def test_null_values_sort_first(store):
    store.insert("node", bundle="article", properties={"title": None})

    query = Query("node").order_by(AddressingKind.PROPERTY, "title")

    assert store.execute(query)[0] == 7


def test_relationship_follows_references(store):
    """Nodes whose author's name starts with "gr"."""
    relationship = Relationship(
        public_field="author.name",
        hops=(
            RelationalHop("uid", AddressingKind.PROPERTY, entity_type="user"),
            RelationalHop("name", AddressingKind.PROPERTY),
        ),
        operators=(Operator.STARTS_WITH,),
        values=("gr",),
    )

    assert store.execute(Query("node").with_relationship(relationship)) == [2, 5, 6]


def test_relationship_through_field_respects_bundles(store):
    relationship = Relationship(
        public_field="tags.name",
        hops=(
            RelationalHop(
                "field_tags",
                AddressingKind.FIELD,
                column="target_id",
                entity_type="taxonomy_term",
                bundles=("tags",),
            ),
            RelationalHop("name", AddressingKind.PROPERTY),
        ),
        operators=(Operator.IN,),
        values=("php", "rust"),
    )

    assert store.execute(Query("node").with_relationship(relationship)) == [2, 3]

    other_vocabulary = Relationship(
        public_field=relationship.public_field,
        hops=(
            RelationalHop(
                "field_tags",
                AddressingKind.FIELD,
                column="target_id",
                entity_type="taxonomy_term",
                bundles=("categories",),
            ),
            relationship.hops[1],
        ),
        operators=relationship.operators,
        values=relationship.values,
    )
    assert store.execute(Query("node").with_relationship(other_vocabulary)) == []


def test_count_ignores_range_and_records_query(store):
    query = Query("node").where_property("status", "published").with_range(0, 1)

    assert store.count(query) == 4
    assert store.last_query is query


def test_register_type_on_empty_store():
    store = LocalEntityStore()
    store.register_type(EntityTypeInfo("user"))
    saved = store.insert("user", properties={"name": "ada"})

    assert saved.id == 1
    assert store.execute(Query("user").where_property("name", "ada")) == [1]
