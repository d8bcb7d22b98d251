"""End-to-end flows through URL parameters, provider and store."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from entityprovider import (
    AddressingKind,
    EntityDataProvider,
    EntityTypeInfo,
    FieldDescriptor,
    HttpMethod,
    LocalEntityStore,
    ProviderSettings,
    RequestContext,
    ResourceDefinition,
)

CONTENT = ResourceDefinition(
    name="content",
    entity_type="node",
    fields=(
        FieldDescriptor("id", storage_property="id"),
        FieldDescriptor("title", storage_property="title"),
        FieldDescriptor(
            "tags",
            storage_property="field_tags",
            addressing=AddressingKind.FIELD,
            column="target_id",
            multiple=True,
        ),
    ),
)

TITLES = ["Kilo", "Alpha", "Juliet", "Bravo", "India", "Charlie", "Hotel", "Delta"]


def build_content() -> EntityDataProvider:
    """Provider over fifteen nodes cycling through tags 1, 2 and 3."""
    store = LocalEntityStore(EntityTypeInfo("node", bundle_key="type", bundles=("a", "b")))
    for n in range(15):
        store.insert(
            "node",
            bundle="a" if n % 2 else "b",
            properties={"title": f"{TITLES[n % len(TITLES)]} {n:02d}"},
            fields={"field_tags": [{"target_id": n % 3 + 1}]},
        )
    return EntityDataProvider(CONTENT, store, settings=ProviderSettings(_env_file=None))


@pytest.fixture
def content():
    return build_content()


def test_sorted_filtered_paginated_list(content):
    """Sort title DESC, tags IN [1, 2], first ten rows."""
    request = RequestContext.from_params(
        {
            "sort": "-title",
            "filter": {"tags": {"value": ["1", "2"], "operator": "IN"}},
            "range": "10",
        }
    )

    rows = content.list(request)
    titles = [row.value("title") for row in rows]

    assert 0 < len(rows) <= 10
    assert all(set(row.value("tags")) & {1, 2} for row in rows)
    assert titles == sorted(titles, reverse=True)


def test_resource_without_bundles_lists_every_bundle(content):
    request = RequestContext.from_params({"range": "50"})

    assert len(content.list(request)) == 15
    assert content.count(request) == 15


def test_write_then_read_round_trip(content):
    created = content.create(
        RequestContext(method=HttpMethod.POST), {"title": "Zulu", "tags": [3]}
    )
    entity_id = created.items[0].id

    content.update(RequestContext(method=HttpMethod.PATCH), entity_id, {"tags": [1, 2]})
    request = RequestContext.from_params({"filter": {"title": "Zulu"}})

    (row,) = content.list(request)
    assert row.id == entity_id
    assert row.value("tags") == [1, 2]

    content.remove(RequestContext(method=HttpMethod.DELETE), entity_id)
    assert content.list(request) == []


@settings(max_examples=50)
@given(st.lists(st.integers(min_value=1, max_value=15), min_size=1, max_size=6))
def test_canonical_path_is_idempotent(path_ids):
    content = build_content()
    request = RequestContext()
    path = ",".join(str(i) for i in path_ids)

    once = content.canonical_path(request, path)

    assert once == path
    assert content.canonical_path(request, once) == once
