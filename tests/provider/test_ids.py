"""Tests for alternate and referenced identifier resolution."""

import pytest

from entityprovider import (
    ClientError,
    FieldDescriptor,
    Operator,
    ResourceLink,
    UnprocessableError,
)
from entityprovider.provider import IdResolver


@pytest.fixture
def resolver(articles, store, resources):
    return IdResolver(articles, store, resources)


def test_without_id_field_returns_input_unchanged(resolver, store):
    assert resolver.resolve(3) == 3
    assert resolver.resolve("anything") == "anything"
    assert store.executed == []


def test_alternate_id_resolves_to_canonical(resolver, store):
    assert resolver.resolve("bravo", "slug") == 2

    query = store.last_query
    assert query.bundles == ("article",)
    assert query.range.count == 1
    (condition,) = query.conditions
    assert (condition.name, condition.value, condition.operator) == ("slug", "bravo", Operator.EQ)


def test_alternate_id_is_scoped_to_resource_bundles(resolver):
    """The page "about" exists but is not an article."""
    with pytest.raises(UnprocessableError, match="The entity ID about by slug cannot be loaded."):
        resolver.resolve("about", "slug")


def test_unknown_id_field_is_client_error(resolver):
    with pytest.raises(ClientError, match='Cannot load an entity using the field "missing"'):
        resolver.resolve("x", "missing")


def test_computed_id_field_is_client_error(resolver):
    with pytest.raises(ClientError, match='Cannot load an entity using the field "label"'):
        resolver.resolve("article:1", "label")


def test_first_match_wins_on_duplicates(resolver, store):
    store.insert("node", bundle="article", properties={"title": "Bravo 2", "slug": "bravo"})

    assert resolver.resolve("bravo", "slug") == 2


def test_referenced_value_resolves_through_referenced_resource(resolver, articles):
    tags = articles.fields.get("tags")

    assert resolver.resolve_referenced("rust", tags) == 3
    assert resolver.resolve_referenced_many(("python", "php"), tags) == (1, 2)


def test_referenced_value_falls_back_to_original(resolver, articles):
    """Canonical ids (or anything unmatched) pass through untouched."""
    tags = articles.fields.get("tags")

    assert resolver.resolve_referenced("2", tags) == "2"


def test_referenced_value_needs_id_property(resolver):
    plain = FieldDescriptor(
        "category", storage_property="category", referenced_resource=ResourceLink("tags")
    )

    assert resolver.resolve_referenced("python", plain) == "python"


def test_referenced_value_without_registry_passes_through(articles, store):
    resolver = IdResolver(articles, store)

    assert resolver.resolve_referenced("rust", articles.fields.get("tags")) == "rust"
