"""Persisted tags and their associations with bookmarks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import Entity, utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Tag(Entity):
    name: str
    slug: str
    description: str | None = None
    color: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class TagAssociation(Entity):
    """Link between a bookmark and a tag.

    ``auto_tagged`` distinguishes scoring-engine output from explicit user
    action. A manual association is never turned back into an automatic one.
    """

    bookmark_id: UUID
    tag: Tag
    auto_tagged: bool = False
    confidence: float | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def slug(self) -> str:
        return self.tag.slug

    def mark_manual(self) -> None:
        self.auto_tagged = False

    def raise_confidence(self, confidence: float) -> bool:
        if self.confidence is not None and self.confidence >= confidence:
            return False
        self.confidence = confidence
        return True

    def backfill_confidence(self, confidence: float) -> bool:
        if self.confidence is not None:
            return False
        self.confidence = confidence
        return True
