"""Persist classified candidates through a unit of work.

Each candidate is one logical unit: classify, write and commit happen inside
a single unit of work. When the store rejects the commit on the
``(source, external_id)`` uniqueness constraint (another writer created the
same identity in between), the unit is rolled back and the candidate is
classified again against the now-visible row. The loop is bounded by
``max_attempts``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stashpy.domain.errors import ConstraintViolation, StashError
from stashpy.domain.model import utcnow

from .apply import apply_changed, build_bookmark
from .candidates import validate_candidate
from .contracts import (
    ChangedClassification,
    ClassificationKind,
    DuplicateClassification,
    NewClassification,
)
from .engine import ReconciliationEngine

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stashpy.domain.model import Bookmark
    from stashpy.domain.ports import IngestRepositories, IngestUnitOfWork

    from .candidates import CandidateItem
    from .contracts import Classification
    from .engine import Clock


log = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3

type UnitOfWorkFactory = Callable[[], IngestUnitOfWork]
# Runs inside the unit of work for each created or updated bookmark, before commit.
type PersistedHook = Callable[[Bookmark, IngestRepositories], None]


@dataclass(slots=True, frozen=True)
class IngestOutcome:
    """Result of ingesting one candidate."""

    classification: Classification
    bookmark: Bookmark
    attempts: int = 1

    @property
    def kind(self) -> ClassificationKind:
        return self.classification.kind


@dataclass(slots=True, frozen=True)
class IngestItemResult:
    index: int
    outcome: IngestOutcome | None = None
    error: StashError | None = None


@dataclass(slots=True)
class IngestBatchResult:
    """Per-index outcomes of an ingest batch with summary counters."""

    items: list[IngestItemResult] = field(default_factory=list)

    @property
    def created(self) -> int:
        return self._count(ClassificationKind.NEW)

    @property
    def updated(self) -> int:
        return self._count(ClassificationKind.CHANGED)

    @property
    def duplicates(self) -> int:
        return self._count(ClassificationKind.DUPLICATE)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if item.error is not None)

    def errors(self) -> list[tuple[int, StashError]]:
        return [(item.index, item.error) for item in self.items if item.error is not None]

    def _count(self, kind: ClassificationKind) -> int:
        return sum(
            1 for item in self.items if item.outcome is not None and item.outcome.kind is kind
        )


def persist_classification(
    candidate: CandidateItem,
    classification: Classification,
    repositories: IngestRepositories,
    *,
    clock: Clock = utcnow,
) -> Bookmark:
    """Apply ``classification`` to the repositories without committing.

    NEW adds a bookmark, CHANGED updates only the differing fields and
    ``last_ingested_at``; DUPLICATE writes nothing.
    """

    match classification:
        case NewClassification():
            bookmark = build_bookmark(candidate, at=clock())
            repositories.bookmarks.add(bookmark)
            log.info("Created bookmark %s (%s)", bookmark.id, bookmark.source)
            return bookmark
        case ChangedClassification():
            bookmark = apply_changed(classification, at=clock())
            log.info(
                "Updated bookmark %s: %s",
                bookmark.id,
                ", ".join(str(name) for name in classification.changed_fields),
            )
            return bookmark
        case DuplicateClassification():
            return classification.existing


def ingest_candidate(
    candidate: CandidateItem,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    clock: Clock = utcnow,
    on_persisted: PersistedHook | None = None,
) -> IngestOutcome:
    """Classify and persist one candidate as a single logical unit.

    Raises:
        ValidationError: the candidate is malformed.
        ConstraintViolation: the uniqueness race persisted for ``max_attempts``.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    normalized = validate_candidate(candidate)
    attempt = 1
    while True:
        try:
            return _ingest_once(
                normalized,
                unit_of_work_factory=unit_of_work_factory,
                clock=clock,
                on_persisted=on_persisted,
                attempt=attempt,
            )
        except ConstraintViolation as exc:
            if attempt >= max_attempts:
                log.error(
                    "Giving up on %s/%s after %d attempts",
                    normalized.source,
                    normalized.external_id or normalized.url,
                    attempt,
                )
                raise
            log.warning("Constraint violation on attempt %d, reclassifying: %s", attempt, exc)
            attempt += 1


def ingest_batch(
    candidates: Iterable[CandidateItem],
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    clock: Clock = utcnow,
    on_persisted: PersistedHook | None = None,
) -> IngestBatchResult:
    """Ingest candidates in order; a failing item never aborts the rest.

    Every candidate commits before the next one is classified, so later
    occurrences of the same identity compare against the earlier one.
    """

    result = IngestBatchResult()
    for index, candidate in enumerate(candidates):
        try:
            outcome = ingest_candidate(
                candidate,
                unit_of_work_factory=unit_of_work_factory,
                max_attempts=max_attempts,
                clock=clock,
                on_persisted=on_persisted,
            )
        except StashError as exc:
            log.warning("Failed to ingest item %d: %s", index, exc)
            result.items.append(IngestItemResult(index=index, error=exc))
            continue
        result.items.append(IngestItemResult(index=index, outcome=outcome))

    log.info(
        "Ingested %d items: created=%d, updated=%d, duplicates=%d, failed=%d",
        len(result.items),
        result.created,
        result.updated,
        result.duplicates,
        result.failed,
    )
    return result


def _ingest_once(
    candidate: CandidateItem,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock,
    on_persisted: PersistedHook | None,
    attempt: int,
) -> IngestOutcome:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        engine = ReconciliationEngine(lookup=repositories.bookmarks, clock=clock)
        classification = engine.classify(candidate)
        bookmark = persist_classification(candidate, classification, repositories, clock=clock)
        if classification.kind is not ClassificationKind.DUPLICATE:
            uow.flush()
            if on_persisted is not None:
                on_persisted(bookmark, repositories)
            uow.commit()
    return IngestOutcome(classification=classification, bookmark=bookmark, attempts=attempt)
