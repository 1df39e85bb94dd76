"""Classification results produced by the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from stashpy.domain.model import Bookmark, TrackedField, TrackedValue


class ClassificationKind(StrEnum):
    NEW = "new"
    CHANGED = "changed"
    DUPLICATE = "duplicate"


class MatchKind(StrEnum):
    """Which identity key located the stored bookmark."""

    EXTERNAL_ID = "external_id"
    URL = "url"


@dataclass(slots=True, frozen=True)
class FieldChange:
    field: TrackedField
    old: TrackedValue
    new: TrackedValue


@dataclass(slots=True, frozen=True, kw_only=True)
class NewClassification:
    """Candidate has no stored counterpart and should be created."""

    kind: Literal[ClassificationKind.NEW] = ClassificationKind.NEW


@dataclass(slots=True, frozen=True, kw_only=True)
class DuplicateClassification:
    """Candidate matches ``existing`` and carries nothing new."""

    existing: Bookmark
    matched_by: MatchKind
    kind: Literal[ClassificationKind.DUPLICATE] = ClassificationKind.DUPLICATE


@dataclass(slots=True, frozen=True, kw_only=True)
class ChangedClassification:
    """Candidate matches ``existing`` and differs in at least one tracked field."""

    existing: Bookmark
    matched_by: MatchKind
    changes: tuple[FieldChange, ...]
    kind: Literal[ClassificationKind.CHANGED] = ClassificationKind.CHANGED

    def __post_init__(self) -> None:
        if not self.changes:
            raise ValueError("Changed classification must include at least one field change")

    @property
    def changed_fields(self) -> tuple[TrackedField, ...]:
        return tuple(change.field for change in self.changes)

    def new_values(self) -> dict[TrackedField, TrackedValue]:
        return {change.field: change.new for change in self.changes}


type Classification = NewClassification | DuplicateClassification | ChangedClassification
