"""Bookmark aggregate: one stored item collected from a source."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .base import Entity, utcnow
from .enums import Source, TrackedField

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

type TrackedValue = str | datetime | None


@dataclass(eq=False, kw_only=True)
class Bookmark(Entity):
    """Persisted bookmark.

    ``first_ingested_at`` is fixed at construction; ``last_ingested_at`` moves
    whenever an ingest changes tracked fields.
    """

    source: Source
    external_id: str | None = None
    url: str | None = None
    content: str | None = None
    author: str | None = None
    source_created_at: datetime | None = None
    first_ingested_at: datetime = field(default_factory=utcnow)
    last_ingested_at: datetime = field(default_factory=utcnow)

    @property
    def identity_key(self) -> tuple[Source, str] | None:
        if self.external_id is None:
            return None
        return (self.source, self.external_id)

    def value_of(self, tracked: TrackedField) -> TrackedValue:
        return getattr(self, str(tracked))

    def apply_changes(self, values: Mapping[TrackedField, TrackedValue], *, at: datetime) -> None:
        """Write the given tracked fields and bump ``last_ingested_at``."""

        for tracked, value in values.items():
            setattr(self, str(tracked), value)
        self.last_ingested_at = at

    def projected(self, values: Mapping[TrackedField, TrackedValue], *, at: datetime) -> Bookmark:
        """Return a detached copy with ``values`` applied, leaving ``self`` untouched."""

        changes: dict[str, TrackedValue] = {
            str(tracked): value for tracked, value in values.items()
        }
        return replace(self, last_ingested_at=at, **changes)
