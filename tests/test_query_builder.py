import logging

import pytest
from google.cloud.firestore_v1.base_query import FieldFilter

from firestore_snapshot import (
    CollectionPath,
    FieldResolutionError,
    FirestoreOperators,
    QueryBuilder,
    Snapshot,
)

from .models import Admin, Note, Post, User


@pytest.fixture
def users(firestore_db):
    """Raw collection reference the builder's output is compared against."""
    return firestore_db.client.collection("users")


@pytest.fixture
def posts(firestore_db):
    return firestore_db.client.collection("posts")


@pytest.fixture
def builder(firestore_db):
    return QueryBuilder.from_path(User.collection_path())


# -----------------------------------------------------------------------------
# Filters
# -----------------------------------------------------------------------------
def test_where_with_condition(builder, users):
    query = builder.where(User.age >= 18).generate()

    assert query == users.where(filter=FieldFilter("age", ">=", 18))


def test_where_with_operator_arguments(builder, users):
    query = builder.where(User.age, "<", 65).where("name", FirestoreOperators.EQ, "Ann").generate()

    expected = users.where(filter=FieldFilter("age", "<", 65)).where(filter=FieldFilter("name", "==", "Ann"))
    assert query == expected


def test_where_uses_alias_as_wire_name(builder, users):
    query = builder.where(User.display_name == "Al").generate()

    assert query == users.where(filter=FieldFilter("displayName", "==", "Al"))


@pytest.mark.parametrize(
    "condition, op_string",
    [
        (lambda: User.age == 1, "=="),
        (lambda: User.age < 1, "<"),
        (lambda: User.age > 1, ">"),
        (lambda: User.age <= 1, "<="),
        (lambda: User.age >= 1, ">="),
    ],
)
def test_comparison_operators(builder, users, condition, op_string):
    query = builder.where(condition()).generate()

    assert query == users.where(filter=FieldFilter("age", op_string, 1))


def test_array_contains(builder, users):
    query = builder.where(User.tags.array_contains("admin")).generate()

    assert query == users.where(filter=FieldFilter("tags", "array_contains", "admin"))


def test_unknown_operator_raises(builder):
    with pytest.raises(ValueError):
        builder.where(User.age, "~=", 3)


def test_missing_operator_raises(builder):
    with pytest.raises(ValueError):
        builder.where(User.age)


def test_condition_with_extra_operator_raises(builder):
    with pytest.raises(ValueError, match="not both"):
        builder.where(User.age >= 18, "<", 3)
    with pytest.raises(ValueError, match="not both"):
        builder.where(User.age >= 18, value=3)


# -----------------------------------------------------------------------------
# Ordering and clause order
# -----------------------------------------------------------------------------
def test_order_ascending_and_descending(builder, users):
    query = builder.order(User.name).order(User.age, descending=True).generate()

    expected = users.order_by("name", direction="ASCENDING").order_by("age", direction="DESCENDING")
    assert query == expected


def test_clause_order_is_preserved(firestore_db, users):
    query = (
        QueryBuilder.from_path(User.collection_path())
        .where(User.age > 18)
        .where(User.name == "Ann")
        .order(User.age)
        .generate()
    )
    swapped = (
        QueryBuilder.from_path(User.collection_path())
        .where(User.name == "Ann")
        .where(User.age > 18)
        .order(User.age)
        .generate()
    )

    expected = (
        users.where(filter=FieldFilter("age", ">", 18))
        .where(filter=FieldFilter("name", "==", "Ann"))
        .order_by("age", direction="ASCENDING")
    )
    assert query == expected
    assert swapped != expected


def test_calls_return_the_same_builder(builder):
    assert builder.where(User.age > 1) is builder
    assert builder.order(User.age) is builder
    assert builder.limit(3) is builder
    assert builder.offset(1) is builder


# -----------------------------------------------------------------------------
# Field resolution failures
# -----------------------------------------------------------------------------
def test_unmapped_field_is_skipped_with_warning(firestore_db, posts, caplog):
    with caplog.at_level(logging.WARNING, logger="firestore_snapshot.query_builder"):
        query = (
            QueryBuilder.from_path(Post.collection_path())
            .where(Post.body == "draft")
            .where(Post.published == True)  # noqa: E712
            .generate()
        )

    assert query == posts.where(filter=FieldFilter("published", "==", True))
    assert "Post.body" in caplog.text


def test_unmapped_order_is_skipped(firestore_db, posts):
    query = (
        QueryBuilder.from_path(Post.collection_path())
        .order(Post.author)
        .order(Post.likes, descending=True)
        .generate()
    )

    assert query == posts.order_by("likes", direction="DESCENDING")


def test_field_of_other_model_is_skipped(builder, users):
    query = builder.where(Post.title == "Hello").where(User.age > 1).generate()

    assert query == users.where(filter=FieldFilter("age", ">", 1))


def test_subclass_field_does_not_resolve_on_parent(builder, users):
    query = builder.where(Admin.level > 2).where(User.age > 1).generate()

    assert query == users.where(filter=FieldFilter("age", ">", 1))


def test_parent_field_resolves_on_subclass(firestore_db):
    admins = firestore_db.client.collection("admins")

    query = QueryBuilder(Admin, admins).where(User.name == "Root").generate()

    assert query == admins.where(filter=FieldFilter("name", "==", "Root"))


def test_strict_builder_raises(firestore_db):
    builder = QueryBuilder.from_path(Post.collection_path(), strict=True)

    with pytest.raises(FieldResolutionError):
        builder.where(Post.body == "draft")


def test_model_must_be_field_name_referable(firestore_db):
    with pytest.raises(TypeError):
        QueryBuilder.from_path(CollectionPath("notes", Note))


# -----------------------------------------------------------------------------
# Pagination
# -----------------------------------------------------------------------------
def test_last_limit_wins(builder, users):
    query = builder.limit(5).limit(2).generate()

    assert query == users.limit(2)


def test_offset(builder, users):
    query = builder.order(User.name).offset(10).generate()

    assert query == users.order_by("name", direction="ASCENDING").offset(10)


def test_cursors_with_raw_documents(builder, users, make_document):
    first = make_document(users.document("alice"), {"name": "Alice"})
    last = make_document(users.document("zoe"), {"name": "Zoe"})

    query = builder.order(User.name).start_after(first).end_before(last).generate()

    expected = users.order_by("name", direction="ASCENDING").start_after(first).end_before(last)
    assert query == expected


def test_cursors_with_snapshots(firestore_db, users, make_document):
    document = make_document(users.document("alice"), {"name": "Alice"})
    snapshot = Snapshot.from_document(document, User)

    query = (
        QueryBuilder.from_path(User.collection_path())
        .start_at(snapshot)
        .end_at(snapshot)
        .generate()
    )

    assert query == users.start_at(document).end_at(document)


def test_cursor_needs_fetched_snapshot(builder, users):
    snapshot = Snapshot(User(name="Alice"), users.document("alice"))

    with pytest.raises(ValueError):
        builder.start_at(snapshot)


# -----------------------------------------------------------------------------
# generate()
# -----------------------------------------------------------------------------
def test_generate_is_idempotent(builder):
    builder.where(User.age > 1).order(User.age)

    first = builder.generate()
    second = builder.generate()

    assert first is second
    assert first == second
