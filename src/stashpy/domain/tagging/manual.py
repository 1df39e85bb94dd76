"""Tag management and user-driven tagging."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from stashpy.domain.errors import DuplicateTagError, NotFoundError, ValidationError
from stashpy.domain.model import Tag, TagAssociation

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from stashpy.domain.ports import IngestRepositories, TagCount

    from .catalog import TagCatalog


log = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 100
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

_SLUG_RE = re.compile(r"^[a-z0-9-]+$")
_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{3}([0-9a-fA-F]{3})?$")


def validate_tag_fields(
    *,
    name: str,
    slug: str,
    description: str | None = None,
    color: str | None = None,
) -> None:
    """Raise :class:`ValidationError` for the first invalid tag field."""

    if not name or len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Tag name must be 1 to {MAX_NAME_LENGTH} characters", field="name"
        )
    if not slug or len(slug) > MAX_SLUG_LENGTH:
        raise ValidationError(
            f"Tag slug must be 1 to {MAX_SLUG_LENGTH} characters", field="slug"
        )
    if not _SLUG_RE.match(slug):
        raise ValidationError(
            "Tag slug may only contain lowercase letters, digits and hyphens", field="slug"
        )
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Tag description must be at most {MAX_DESCRIPTION_LENGTH} characters",
            field="description",
        )
    if color is not None and not _COLOR_RE.match(color):
        raise ValidationError("Tag color must look like #rgb or #rrggbb", field="color")


def create_tag(
    repositories: IngestRepositories,
    *,
    name: str,
    slug: str,
    description: str | None = None,
    color: str | None = None,
) -> Tag:
    """Create a tag, rejecting invalid fields and slug or name collisions."""

    validate_tag_fields(name=name, slug=slug, description=description, color=color)
    if repositories.tags.get_by_slug(slug) is not None:
        raise DuplicateTagError(f'A tag with slug "{slug}" already exists')
    if repositories.tags.get_by_name(name) is not None:
        raise DuplicateTagError(f'A tag with name "{name}" already exists')

    tag = Tag(name=name, slug=slug, description=description, color=color)
    repositories.tags.add(tag)
    log.info("Created tag %s (%s)", tag.slug, tag.id)
    return tag


def ensure_tag(repositories: IngestRepositories, slug: str, catalog: TagCatalog) -> Tag:
    """Return the stored tag for ``slug``, creating it from ``catalog`` if missing.

    A stored tag with the definition's name but another slug is reused.
    """

    tag = repositories.tags.get_by_slug(slug)
    if tag is not None:
        return tag

    definition = catalog.by_slug(slug)
    if definition is None:
        raise NotFoundError("tag", slug)

    tag = repositories.tags.get_by_name(definition.name)
    if tag is not None:
        return tag

    tag = Tag(
        name=definition.name,
        slug=definition.slug,
        description=definition.description,
        color=definition.color,
    )
    repositories.tags.add(tag)
    log.info("Created tag %s from catalog", tag.slug)
    return tag


def initialize_default_tags(repositories: IngestRepositories, catalog: TagCatalog) -> list[Tag]:
    """Seed tag rows from ``catalog`` when the store holds no tags yet."""

    existing = repositories.tags.list_with_counts()
    if existing:
        log.info("Tags already exist, skipping initialization")
        return []

    created: list[Tag] = []
    for definition in catalog:
        tag = Tag(
            name=definition.name,
            slug=definition.slug,
            description=definition.description,
            color=definition.color,
        )
        repositories.tags.add(tag)
        created.append(tag)
    log.info("Initialized %d default tags", len(created))
    return created


def list_tags_with_counts(repositories: IngestRepositories) -> list[TagCount]:
    return sorted(repositories.tags.list_with_counts(), key=lambda item: item.tag.name)


def bookmark_tags(repositories: IngestRepositories, bookmark_id: UUID) -> list[TagAssociation]:
    """Associations of a bookmark: auto-tagged first, then by confidence, oldest first."""

    _require_bookmark(repositories, bookmark_id)
    associations = repositories.tag_associations.for_bookmark(bookmark_id)
    return sorted(associations, key=_association_order)


def add_manual_tag(
    repositories: IngestRepositories,
    bookmark_id: UUID,
    slug: str,
) -> TagAssociation:
    """Attach ``slug`` to a bookmark as a user decision.

    An existing automatic association becomes manual and keeps its confidence.
    """

    _require_bookmark(repositories, bookmark_id)
    tag = _require_tag(repositories, slug)
    return _attach_manual(repositories, bookmark_id, tag)


def remove_tag(repositories: IngestRepositories, bookmark_id: UUID, slug: str) -> bool:
    tag = repositories.tags.get_by_slug(slug)
    if tag is None:
        return False
    association = repositories.tag_associations.get(bookmark_id, tag.id)
    if association is None:
        return False
    repositories.tag_associations.remove(association)
    log.info("Removed tag %s from bookmark %s", slug, bookmark_id)
    return True


def copy_tags(
    repositories: IngestRepositories,
    source_bookmark_id: UUID,
    target_bookmark_id: UUID,
    slugs: Iterable[str] | None = None,
) -> list[TagAssociation]:
    """Copy the source bookmark's tags onto the target as manual tags.

    With ``slugs`` only those tags are copied; each slug must name a stored
    tag. Tags the source does not carry are skipped.
    """

    _require_bookmark(repositories, source_bookmark_id)
    _require_bookmark(repositories, target_bookmark_id)
    source_associations = repositories.tag_associations.for_bookmark(source_bookmark_id)

    if slugs is None:
        ordered = sorted(source_associations, key=_association_order)
        tags = [association.tag for association in ordered]
    else:
        wanted = [_require_tag(repositories, slug) for slug in dict.fromkeys(slugs)]
        carried = {association.tag.id for association in source_associations}
        tags = [tag for tag in wanted if tag.id in carried]

    copied = [_attach_manual(repositories, target_bookmark_id, tag) for tag in tags]
    log.info(
        "Copied %d tags from bookmark %s to %s",
        len(copied),
        source_bookmark_id,
        target_bookmark_id,
    )
    return copied


def _attach_manual(repositories: IngestRepositories, bookmark_id: UUID, tag: Tag) -> TagAssociation:
    association = repositories.tag_associations.get(bookmark_id, tag.id)
    if association is not None:
        association.mark_manual()
        return association
    association = TagAssociation(bookmark_id=bookmark_id, tag=tag, auto_tagged=False)
    repositories.tag_associations.add(association)
    log.info("Tagged bookmark %s with %s", bookmark_id, tag.slug)
    return association


def _require_bookmark(repositories: IngestRepositories, bookmark_id: UUID) -> None:
    if repositories.bookmarks.get(bookmark_id) is None:
        raise NotFoundError("bookmark", bookmark_id)


def _require_tag(repositories: IngestRepositories, slug: str) -> Tag:
    tag = repositories.tags.get_by_slug(slug)
    if tag is None:
        raise NotFoundError("tag", slug)
    return tag


def _association_order(association: TagAssociation) -> tuple[bool, float, float]:
    confidence = association.confidence if association.confidence is not None else -1.0
    return (not association.auto_tagged, -confidence, association.created_at.timestamp())

