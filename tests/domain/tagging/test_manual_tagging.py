from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from stashpy.domain.errors import (
    ConstraintViolation,
    DuplicateTagError,
    NotFoundError,
    ValidationError,
)
from stashpy.domain.model import Tag, TagAssociation
from stashpy.domain.tagging import (
    TagCatalog,
    add_manual_tag,
    apply_tag_matches,
    bookmark_tags,
    copy_tags,
    create_tag,
    default_tag_catalog,
    initialize_default_tags,
    list_tags_with_counts,
    remove_tag,
    validate_tag_fields,
)
from stashpy.domain.tagging.scoring import TagMatch
from tests.helpers.bookmarks import BASE_TIME, InMemoryStore, in_memory_repositories, make_bookmark


@pytest.mark.parametrize(
    ("fields", "bad_field"),
    [
        ({"name": "", "slug": "ok"}, "name"),
        ({"name": "x" * 101, "slug": "ok"}, "name"),
        ({"name": "Ok", "slug": ""}, "slug"),
        ({"name": "Ok", "slug": "Not Valid"}, "slug"),
        ({"name": "Ok", "slug": "s" * 101}, "slug"),
        ({"name": "Ok", "slug": "ok", "description": "d" * 501}, "description"),
        ({"name": "Ok", "slug": "ok", "color": "red"}, "color"),
        ({"name": "Ok", "slug": "ok", "color": "#12345"}, "color"),
    ],
)
def test_validate_tag_fields_rejects(fields: dict[str, str], bad_field: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_tag_fields(**fields)

    assert excinfo.value.field == bad_field


def test_validate_tag_fields_accepts_short_and_long_colors() -> None:
    validate_tag_fields(name="Ok", slug="ok-1", color="#abc")
    validate_tag_fields(name="Ok", slug="ok-1", color="#A1B2C3", description="fine")


def test_create_tag_rejects_duplicate_slug_and_name(store: InMemoryStore) -> None:
    repositories = in_memory_repositories(store)
    create_tag(repositories, name="Reading", slug="reading")

    with pytest.raises(DuplicateTagError, match="slug"):
        create_tag(repositories, name="Other", slug="reading")
    with pytest.raises(DuplicateTagError, match="name"):
        create_tag(repositories, name="Reading", slug="other")


def test_duplicate_tag_error_is_a_constraint_violation() -> None:
    assert issubclass(DuplicateTagError, ConstraintViolation)


def test_initialize_default_tags_only_when_empty(store: InMemoryStore) -> None:
    repositories = in_memory_repositories(store)
    catalog = default_tag_catalog()

    created = initialize_default_tags(repositories, catalog)
    again = initialize_default_tags(repositories, catalog)

    assert [tag.slug for tag in created] == list(catalog.slugs)
    assert again == []
    assert len(store.tags) == 12


def test_initialize_default_tags_skips_when_any_tag_exists(store: InMemoryStore) -> None:
    repositories = in_memory_repositories(store)
    create_tag(repositories, name="Mine", slug="mine")

    assert initialize_default_tags(repositories, default_tag_catalog()) == []
    assert len(store.tags) == 1


def test_list_tags_with_counts_orders_by_name(store: InMemoryStore) -> None:
    repositories = in_memory_repositories(store)
    zeta = create_tag(repositories, name="zeta", slug="zeta")
    create_tag(repositories, name="alpha", slug="alpha")
    bookmark = store.add_bookmark(make_bookmark())
    add_manual_tag(repositories, bookmark.id, zeta.slug)

    counts = list_tags_with_counts(repositories)

    assert [(entry.tag.name, entry.bookmark_count) for entry in counts] == [
        ("alpha", 0),
        ("zeta", 1),
    ]


def test_add_manual_tag_requires_known_bookmark_and_slug(store: InMemoryStore) -> None:
    repositories = in_memory_repositories(store)
    create_tag(repositories, name="Reading", slug="reading")
    bookmark = store.add_bookmark(make_bookmark())

    with pytest.raises(NotFoundError) as excinfo:
        add_manual_tag(repositories, uuid4(), "reading")
    assert excinfo.value.kind == "bookmark"

    with pytest.raises(NotFoundError) as excinfo:
        add_manual_tag(repositories, bookmark.id, "missing")
    assert excinfo.value.kind == "tag"


def test_add_manual_tag_converts_auto_association(
    store: InMemoryStore, small_catalog: TagCatalog
) -> None:
    repositories = in_memory_repositories(store)
    bookmark = store.add_bookmark(make_bookmark())
    apply_tag_matches(
        bookmark.id,
        [TagMatch(tag_slug="coding", tag_name="coding", confidence=0.5, matched_keywords=())],
        repositories,
        small_catalog,
    )

    association = add_manual_tag(repositories, bookmark.id, "coding")

    assert association.auto_tagged is False
    assert association.confidence == 0.5
    assert len(repositories.tag_associations.for_bookmark(bookmark.id)) == 1


def test_remove_tag(store: InMemoryStore) -> None:
    repositories = in_memory_repositories(store)
    create_tag(repositories, name="Reading", slug="reading")
    bookmark = store.add_bookmark(make_bookmark())
    add_manual_tag(repositories, bookmark.id, "reading")

    assert remove_tag(repositories, bookmark.id, "reading") is True
    assert remove_tag(repositories, bookmark.id, "reading") is False
    assert remove_tag(repositories, bookmark.id, "missing") is False


def test_bookmark_tags_order_auto_first_then_confidence_then_age(store: InMemoryStore) -> None:
    repositories = in_memory_repositories(store)
    bookmark = store.add_bookmark(make_bookmark())
    tags = {slug: Tag(name=slug, slug=slug) for slug in ("manual", "low", "high", "unscored")}
    for tag in tags.values():
        repositories.tags.add(tag)
    rows = [
        TagAssociation(
            bookmark_id=bookmark.id, tag=tags["manual"], auto_tagged=False, confidence=0.9,
            created_at=BASE_TIME,
        ),
        TagAssociation(
            bookmark_id=bookmark.id, tag=tags["low"], auto_tagged=True, confidence=0.4,
            created_at=BASE_TIME,
        ),
        TagAssociation(
            bookmark_id=bookmark.id, tag=tags["unscored"], auto_tagged=True, confidence=None,
            created_at=BASE_TIME,
        ),
        TagAssociation(
            bookmark_id=bookmark.id, tag=tags["high"], auto_tagged=True, confidence=0.8,
            created_at=BASE_TIME + timedelta(minutes=1),
        ),
    ]
    for row in rows:
        repositories.tag_associations.add(row)

    ordered = bookmark_tags(repositories, bookmark.id)

    assert [association.slug for association in ordered] == ["high", "low", "unscored", "manual"]


def test_bookmark_tags_requires_known_bookmark(store: InMemoryStore) -> None:
    with pytest.raises(NotFoundError):
        bookmark_tags(in_memory_repositories(store), uuid4())


def test_copy_tags_copies_all_as_manual(store: InMemoryStore, small_catalog: TagCatalog) -> None:
    repositories = in_memory_repositories(store)
    source = store.add_bookmark(make_bookmark(external_id="1"))
    target = store.add_bookmark(make_bookmark(external_id="2"))
    apply_tag_matches(
        source.id,
        [
            TagMatch(tag_slug="ai-ml", tag_name="ai/ml", confidence=0.7, matched_keywords=()),
            TagMatch(tag_slug="coding", tag_name="coding", confidence=0.4, matched_keywords=()),
        ],
        repositories,
        small_catalog,
    )

    copied = copy_tags(repositories, source.id, target.id)

    assert [association.slug for association in copied] == ["ai-ml", "coding"]
    assert all(association.auto_tagged is False for association in copied)
    assert all(association.bookmark_id == target.id for association in copied)


def test_copy_tags_with_slugs_filters_and_validates(
    store: InMemoryStore, small_catalog: TagCatalog
) -> None:
    repositories = in_memory_repositories(store)
    source = store.add_bookmark(make_bookmark(external_id="1"))
    target = store.add_bookmark(make_bookmark(external_id="2"))
    create_tag(repositories, name="unused", slug="unused")
    apply_tag_matches(
        source.id,
        [TagMatch(tag_slug="coding", tag_name="coding", confidence=0.4, matched_keywords=())],
        repositories,
        small_catalog,
    )

    copied = copy_tags(repositories, source.id, target.id, ["coding", "unused"])

    assert [association.slug for association in copied] == ["coding"]
    with pytest.raises(NotFoundError):
        copy_tags(repositories, source.id, target.id, ["does-not-exist"])
