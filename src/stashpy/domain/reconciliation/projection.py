"""In-memory overlay of pending batch results over the store.

Classifying a batch must not see stale store state for identities that an
earlier candidate of the same batch already created or updated. The
projection answers the same lookups as a repository, but with earlier
outcomes layered on top.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from stashpy.domain.model import Bookmark, Source
    from stashpy.domain.ports import BookmarkLookup


class BatchProjection:
    """A :class:`~stashpy.domain.ports.BookmarkLookup` with pending writes applied."""

    def __init__(self, store: BookmarkLookup) -> None:
        self._store = store
        self._updated: dict[UUID, Bookmark] = {}
        self._created_by_key: dict[tuple[Source, str], Bookmark] = {}
        self._created_by_url: dict[str, Bookmark] = {}

    def find_by_source_and_external_id(self, source: Source, external_id: str) -> Bookmark | None:
        created = self._created_by_key.get((source, external_id))
        if created is not None:
            return self._current(created)
        stored = self._store.find_by_source_and_external_id(source, external_id)
        if stored is None:
            return None
        return self._current(stored)

    def find_by_url(self, url: str) -> Bookmark | None:
        # Stored rows always predate this batch, so they win the earliest-ingested tie-break.
        stored = self._store.find_by_url(url)
        if stored is not None:
            return self._current(stored)
        created = self._created_by_url.get(url)
        if created is None:
            return None
        return self._current(created)

    def record_created(self, bookmark: Bookmark) -> None:
        key = bookmark.identity_key
        if key is not None:
            self._created_by_key.setdefault(key, bookmark)
        if bookmark.url is not None:
            self._created_by_url.setdefault(bookmark.url, bookmark)

    def record_updated(self, bookmark: Bookmark) -> None:
        self._updated[bookmark.id] = bookmark

    def _current(self, bookmark: Bookmark) -> Bookmark:
        return self._updated.get(bookmark.id, bookmark)
