"""Reconciliation engine: classify candidates as NEW, CHANGED or DUPLICATE.

The engine is read-only with respect to the store. Persisting a
classification is a separate step (see :mod:`.persist`), so the same engine
serves both dry-run badge computation and actual ingestion.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stashpy.domain.errors import StashError
from stashpy.domain.model import utcnow

from .apply import build_bookmark, project_changed
from .candidates import validate_candidate
from .changes import detect_changes
from .contracts import (
    ChangedClassification,
    DuplicateClassification,
    NewClassification,
)
from .projection import BatchProjection
from .resolve import resolve_existing

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from stashpy.domain.ports import BookmarkLookup

    from .candidates import CandidateItem
    from .contracts import Classification


log = logging.getLogger(__name__)

type Clock = Callable[[], datetime]


@dataclass(slots=True, frozen=True)
class BatchOutcome:
    """Per-index result of classifying one candidate of a batch."""

    index: int
    candidate: CandidateItem | None = None
    classification: Classification | None = None
    error: StashError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class ReconciliationEngine:
    """Classify candidates against a bookmark lookup."""

    lookup: BookmarkLookup
    clock: Clock = field(default=utcnow)

    def classify(self, candidate: CandidateItem) -> Classification:
        """Classify one candidate against the current store state.

        Raises:
            ValidationError: the candidate has neither url nor content.
        """

        return _classify(validate_candidate(candidate), self.lookup)

    def classify_batch(self, candidates: Iterable[CandidateItem]) -> list[BatchOutcome]:
        """Classify candidates in order, each seeing the projected outcome of earlier ones.

        Invalid candidates are reported at their index and leave the projection
        untouched; the rest of the batch is still classified.
        """

        projection = BatchProjection(self.lookup)
        outcomes: list[BatchOutcome] = []
        for index, candidate in enumerate(candidates):
            try:
                normalized = validate_candidate(candidate)
            except StashError as exc:
                log.warning("Rejected candidate %d: %s", index, exc)
                outcomes.append(BatchOutcome(index=index, candidate=candidate, error=exc))
                continue

            classification = _classify(normalized, projection)
            _project(projection, normalized, classification, at=self.clock())
            outcomes.append(
                BatchOutcome(index=index, candidate=candidate, classification=classification)
            )
        return outcomes


def _classify(candidate: CandidateItem, lookup: BookmarkLookup) -> Classification:
    resolved = resolve_existing(candidate, lookup)
    if resolved is None:
        key = candidate.external_id or candidate.url
        log.debug("Candidate %s/%s is new", candidate.source, key)
        return NewClassification()

    existing, matched_by = resolved
    changes = detect_changes(candidate, existing)
    if not changes:
        log.debug("Candidate matches bookmark %s by %s without changes", existing.id, matched_by)
        return DuplicateClassification(existing=existing, matched_by=matched_by)

    log.debug(
        "Candidate changes bookmark %s (%s)",
        existing.id,
        ", ".join(str(change.field) for change in changes),
    )
    return ChangedClassification(existing=existing, matched_by=matched_by, changes=changes)


def _project(
    projection: BatchProjection,
    candidate: CandidateItem,
    classification: Classification,
    *,
    at: datetime,
) -> None:
    match classification:
        case NewClassification():
            projection.record_created(build_bookmark(candidate, at=at))
        case ChangedClassification():
            projection.record_updated(project_changed(classification, at=at))
        case DuplicateClassification():
            pass
