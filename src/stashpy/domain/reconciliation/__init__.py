"""Reconciliation of incoming candidates against stored bookmarks.

Layered flow:
1) normalize and validate the candidate
2) resolve the stored counterpart by ``(source, external_id)``, then ``url``
3) detect changes on the tracked fields
4) classify as NEW, CHANGED or DUPLICATE
5) persist and commit, retrying on uniqueness races
"""

from __future__ import annotations

from .candidates import CandidateItem, extract_external_id, normalize_candidate, validate_candidate
from .changes import DELETED_AUTHOR_MARKERS, detect_changes, is_deleted_author
from .contracts import (
    ChangedClassification,
    Classification,
    ClassificationKind,
    DuplicateClassification,
    FieldChange,
    MatchKind,
    NewClassification,
)
from .engine import BatchOutcome, ReconciliationEngine
from .persist import (
    DEFAULT_MAX_ATTEMPTS,
    IngestBatchResult,
    IngestItemResult,
    IngestOutcome,
    ingest_batch,
    ingest_candidate,
    persist_classification,
)
from .projection import BatchProjection

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DELETED_AUTHOR_MARKERS",
    "BatchOutcome",
    "BatchProjection",
    "CandidateItem",
    "ChangedClassification",
    "Classification",
    "ClassificationKind",
    "DuplicateClassification",
    "FieldChange",
    "IngestBatchResult",
    "IngestItemResult",
    "IngestOutcome",
    "MatchKind",
    "NewClassification",
    "ReconciliationEngine",
    "detect_changes",
    "extract_external_id",
    "ingest_batch",
    "ingest_candidate",
    "is_deleted_author",
    "normalize_candidate",
    "persist_classification",
    "validate_candidate",
]
