"""Shared test fixtures.

Seeded content:
    users:  1 ada, 2 grace
    terms:  1 python, 2 php, 3 rust (vocabulary "tags")
    nodes:  1 article Alpha    published  ada    tags [1]
            2 article Bravo    published  grace  tags [2, 3]
            3 article Charlie  draft      ada    tags [3]
            4 page    About    published  ada
            5 article Delta    private    grace  tags [1]
            6 article Echo     published  grace  tags []
"""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from entityprovider import (
    AccessGuard,
    AddressingKind,
    EntityDataProvider,
    EntityTypeInfo,
    FieldDescriptor,
    HttpMethod,
    LocalEntityStore,
    Operation,
    ProviderSettings,
    RequestContext,
    ResourceDefinition,
    ResourceLink,
    ResourceRegistry,
)

ADMIN = {"uid": 1, "admin": True}
EDITOR = {"uid": 2, "admin": False}


def editorial_access(op, entity_type, entity, account):
    """Private nodes are reserved to admins. No opinion on anything else."""
    if entity_type != "node" or entity.properties.get("status") != "private":
        return None
    return bool(account and account.get("admin"))


def admin_only_edit(op, interpreter):
    if op is Operation.VIEW:
        return True
    return bool(interpreter.account and interpreter.account.get("admin"))


def owner_only(op, interpreter):
    return bool(interpreter.account) and interpreter.account.get("uid") == interpreter.id


NODE = EntityTypeInfo(
    "node",
    id_key="nid",
    bundle_key="type",
    bundles=("article", "page"),
    property_columns={"author": "uid"},
    url_template="/node/{id}",
)
USER = EntityTypeInfo("user", id_key="uid", url_template="/user/{id}")
TERM = EntityTypeInfo("taxonomy_term", id_key="tid", bundle_key="vocabulary", bundles=("tags",))

USERS = ResourceDefinition(
    name="users",
    entity_type="user",
    fields=(
        FieldDescriptor("id", storage_property="uid"),
        FieldDescriptor("name", storage_property="name"),
        FieldDescriptor("mail", storage_property="mail", access_policy=owner_only),
        FieldDescriptor("display", callback=lambda i: f"@{i.property_value('name')}"),
    ),
)

TAGS = ResourceDefinition(
    name="tags",
    entity_type="taxonomy_term",
    bundles=("tags",),
    fields=(
        FieldDescriptor("id", storage_property="tid"),
        FieldDescriptor("name", storage_property="name"),
    ),
)

ARTICLE_FIELDS = (
    FieldDescriptor("id", storage_property="nid"),
    FieldDescriptor("title", storage_property="title"),
    FieldDescriptor("slug", storage_property="slug"),
    FieldDescriptor("status", storage_property="status", access_policy=admin_only_edit),
    FieldDescriptor(
        "author",
        storage_property="author",
        referenced_resource=ResourceLink("users"),
        referenced_id_property="name",
    ),
    FieldDescriptor(
        "tags",
        storage_property="field_tags",
        addressing=AddressingKind.FIELD,
        column="target_id",
        multiple=True,
        referenced_resource=ResourceLink("tags"),
        referenced_id_property="name",
    ),
    FieldDescriptor("changed", storage_property="changed", methods={HttpMethod.GET}),
    FieldDescriptor("label", callback=lambda i: f"{i.bundle}:{i.id}"),
)

ARTICLES = ResourceDefinition(
    name="articles",
    entity_type="node",
    bundles=("article",),
    fields=ARTICLE_FIELDS,
)


def seed(store: LocalEntityStore) -> None:
    store.insert("user", properties={"name": "ada", "mail": "ada@example.com"}, entity_id=1)
    store.insert("user", properties={"name": "grace", "mail": "grace@example.com"}, entity_id=2)

    for tid, name in ((1, "python"), (2, "php"), (3, "rust")):
        store.insert("taxonomy_term", bundle="tags", properties={"name": name}, entity_id=tid)

    nodes = (
        (1, "article", "Alpha", "published", 1, [1]),
        (2, "article", "Bravo", "published", 2, [2, 3]),
        (3, "article", "Charlie", "draft", 1, [3]),
        (4, "page", "About", "published", 1, []),
        (5, "article", "Delta", "private", 2, [1]),
        (6, "article", "Echo", "published", 2, []),
    )
    for nid, bundle, title, status, uid, tags in nodes:
        store.insert(
            "node",
            bundle=bundle,
            properties={
                "title": title,
                "slug": title.lower(),
                "status": status,
                "uid": uid,
                "changed": 1_700_000_000 + nid,
            },
            fields={"field_tags": [{"target_id": tid} for tid in tags]},
            entity_id=nid,
        )


@pytest.fixture
def settings():
    return ProviderSettings(_env_file=None)


@pytest.fixture
def store():
    """Store with node, user and taxonomy_term types, seeded."""
    store = LocalEntityStore(NODE, USER, TERM)
    seed(store)
    return store


@pytest.fixture
def resources(store):
    """Registry with users, tags and articles registered."""
    registry = ResourceRegistry(store)
    registry.register(USERS)
    registry.register(TAGS)
    registry.register(ARTICLES)
    return registry


@pytest.fixture
def articles(resources):
    return resources.get(ResourceLink("articles"))


@pytest.fixture
def guard():
    return AccessGuard(editorial_access)


@pytest.fixture
def provider(store, resources, guard, settings):
    """Articles provider with editorial access rules."""
    return EntityDataProvider(
        resources.get(ResourceLink("articles")),
        store,
        resources=resources,
        guard=guard,
        settings=settings,
    )


@pytest.fixture
def admin_get():
    return RequestContext(method=HttpMethod.GET, account=ADMIN)


@pytest.fixture
def anonymous_get():
    return RequestContext(method=HttpMethod.GET, account=None)


@pytest.fixture
def admin():
    return ADMIN


@pytest.fixture
def editor():
    return EDITOR


@pytest.fixture
def article_fields():
    """Field descriptors of the articles resource, for building variants."""
    return ARTICLE_FIELDS
