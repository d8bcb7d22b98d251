"""Tests for field descriptors and the field definition registry."""

import pytest

from entityprovider.core.entity import EntityTypeInfo
from entityprovider.core.errors import ServerConfigurationError
from entityprovider.core.field import (
    ALL_METHODS,
    AddressingKind,
    FieldDefinitionRegistry,
    FieldDescriptor,
    HttpMethod,
)

NODE = EntityTypeInfo("node", bundle_key="type", bundles=("article", "page"))


def test_descriptor_without_storage_is_computed():
    """A descriptor with no storage property can never be filtered, sorted or written."""
    label = FieldDescriptor("label", callback=lambda i: "x")

    assert label.computed is True
    assert FieldDescriptor("title", storage_property="title").computed is False


def test_descriptor_normalizes_bundles_and_methods():
    descriptor = FieldDescriptor(
        "title", storage_property="title", bundles=["article"], methods={HttpMethod.GET}
    )

    assert descriptor.bundles == ("article",)
    assert descriptor.methods == frozenset({HttpMethod.GET})
    assert FieldDescriptor("id", storage_property="id").methods == ALL_METHODS


def test_descriptor_set_without_storage_raises():
    label = FieldDescriptor("label")

    with pytest.raises(TypeError):
        label.set("x", interpreter=None)


def test_registry_keeps_declaration_order():
    registry = FieldDefinitionRegistry(
        (
            FieldDescriptor("title", storage_property="title"),
            FieldDescriptor("id", storage_property="id"),
            FieldDescriptor("tags", "field_tags", AddressingKind.FIELD, column="target_id"),
        )
    )

    assert registry.names() == ("title", "id", "tags")
    assert [d.public_name for d in registry] == ["title", "id", "tags"]
    assert "tags" in registry
    assert "missing" not in registry
    assert registry.get("missing") is None
    assert len(registry) == 3


def test_registry_rejects_duplicate_public_names():
    with pytest.raises(ServerConfigurationError, match="title"):
        FieldDefinitionRegistry(
            (
                FieldDescriptor("title", storage_property="title"),
                FieldDescriptor("title", storage_property="name"),
            )
        )


def test_build_inherits_resource_bundles():
    """Descriptors without bundles inherit the resource's; explicit ones are kept."""
    registry = FieldDefinitionRegistry.build(
        (
            FieldDescriptor("title", storage_property="title"),
            FieldDescriptor("body", storage_property="body", bundles=("page",)),
        ),
        NODE,
        bundles=("article",),
    )

    assert registry.bundles == ("article",)
    assert registry.get("title").bundles == ("article",)
    assert registry.get("body").bundles == ("page",)


def test_build_without_bundles_covers_every_bundle():
    registry = FieldDefinitionRegistry.build(
        (FieldDescriptor("title", storage_property="title"),), NODE
    )

    assert registry.bundles == ("article", "page")
    assert registry.get("title").bundles == ("article", "page")


def test_build_on_unbundled_type_leaves_bundles_empty():
    registry = FieldDefinitionRegistry.build(
        (FieldDescriptor("name", storage_property="name"),), EntityTypeInfo("user")
    )

    assert registry.bundles == ()
    assert registry.get("name").bundles == ()


def test_public_name_for_property_returns_first_declared():
    registry = FieldDefinitionRegistry(
        (
            FieldDescriptor("headline", storage_property="title"),
            FieldDescriptor("title", storage_property="title"),
        )
    )

    assert registry.public_name_for_property("title") == "headline"
    assert registry.public_name_for_property("body") is None
