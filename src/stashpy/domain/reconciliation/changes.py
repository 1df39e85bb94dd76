"""Change detection between a candidate and its stored counterpart."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stashpy.domain.model import TrackedField

from .contracts import FieldChange

if TYPE_CHECKING:
    from stashpy.domain.model import Bookmark

    from .candidates import CandidateItem


# Authors shown by platforms for removed accounts. They never replace a known author.
DELETED_AUTHOR_MARKERS = frozenset({"[deleted]", "@[deleted]"})


def is_deleted_author(author: str | None) -> bool:
    return author is not None and author.strip().lower() in DELETED_AUTHOR_MARKERS


def detect_changes(candidate: CandidateItem, existing: Bookmark) -> tuple[FieldChange, ...]:
    """Return the tracked fields where ``candidate`` differs from ``existing``.

    Text fields count as changed when the candidate value is non-empty and
    differs from the stored value after trimming both. The origin timestamp is
    only ever backfilled: it counts as changed when nothing is stored yet.
    """

    changes: list[FieldChange] = []

    content_change = _text_change(TrackedField.CONTENT, candidate.content, existing.content)
    if content_change is not None:
        changes.append(content_change)

    if not is_deleted_author(candidate.author):
        author_change = _text_change(TrackedField.AUTHOR, candidate.author, existing.author)
        if author_change is not None:
            changes.append(author_change)

    if candidate.timestamp is not None and existing.source_created_at is None:
        changes.append(FieldChange(TrackedField.SOURCE_CREATED_AT, None, candidate.timestamp))

    return tuple(changes)


def _text_change(field: TrackedField, new: str | None, old: str | None) -> FieldChange | None:
    if new is None:
        return None
    trimmed = new.strip()
    if not trimmed:
        return None
    if old is not None and old.strip() == trimmed:
        return None
    return FieldChange(field, old, trimmed)
