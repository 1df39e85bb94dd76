"""Ports for persisting domain aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from stashpy.domain.model import Bookmark, Tag, TagAssociation

if TYPE_CHECKING:
    from uuid import UUID

    from stashpy.domain.model import Source


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class BookmarkLookup(Protocol):
    """Read-only identity lookups used by reconciliation."""

    def find_by_source_and_external_id(
        self, source: Source, external_id: str
    ) -> Bookmark | None: ...

    def find_by_url(self, url: str) -> Bookmark | None:
        """Return the earliest ingested bookmark for ``url``.

        Ties on ``first_ingested_at`` are broken by the lowest id so the result
        never depends on incidental storage order.
        """
        ...


@runtime_checkable
class BookmarkRepository(BookmarkLookup, Repository[Bookmark], Protocol):
    """Persistence contract for bookmarks."""

    def get(self, bookmark_id: UUID) -> Bookmark | None: ...

    def list(self, *, source: Source | None = None) -> list[Bookmark]: ...


@dataclass(slots=True, frozen=True)
class TagCount:
    tag: Tag
    bookmark_count: int


@runtime_checkable
class TagRepository(Repository[Tag], Protocol):
    """Persistence contract for tags."""

    def get_by_slug(self, slug: str) -> Tag | None: ...

    def get_by_name(self, name: str) -> Tag | None: ...

    def list_with_counts(self) -> list[TagCount]: ...


@runtime_checkable
class TagAssociationRepository(Repository[TagAssociation], Protocol):
    """Persistence contract for bookmark/tag associations."""

    def get(self, bookmark_id: UUID, tag_id: UUID) -> TagAssociation | None: ...

    def for_bookmark(self, bookmark_id: UUID) -> list[TagAssociation]: ...

    def remove(self, association: TagAssociation) -> None: ...
