"""Materialize classifications onto bookmarks.

These helpers only touch domain objects; persisting and committing them is
the job of :mod:`stashpy.domain.reconciliation.persist`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from stashpy.domain.model import Bookmark

if TYPE_CHECKING:
    from datetime import datetime

    from .candidates import CandidateItem
    from .contracts import ChangedClassification


def build_bookmark(candidate: CandidateItem, *, at: datetime) -> Bookmark:
    """Create a new bookmark for a NEW candidate ingested at ``at``."""

    return Bookmark(
        source=candidate.source,
        external_id=candidate.external_id,
        url=candidate.url,
        content=candidate.content,
        author=candidate.author,
        source_created_at=candidate.timestamp,
        first_ingested_at=at,
        last_ingested_at=at,
    )


def apply_changed(classification: ChangedClassification, *, at: datetime) -> Bookmark:
    """Write the differing fields onto the stored bookmark in place."""

    existing = classification.existing
    existing.apply_changes(classification.new_values(), at=at)
    return existing


def project_changed(classification: ChangedClassification, *, at: datetime) -> Bookmark:
    """Return the bookmark as it would look after the update, without mutating it."""

    return classification.existing.projected(classification.new_values(), at=at)
