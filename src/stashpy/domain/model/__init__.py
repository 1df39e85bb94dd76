"""Domain model for stashpy."""

from __future__ import annotations

from .base import Entity, new_id, utcnow
from .bookmark import Bookmark, TrackedValue
from .enums import Source, TrackedField
from .tag import Tag, TagAssociation

__all__ = [
    "Bookmark",
    "Entity",
    "Source",
    "Tag",
    "TagAssociation",
    "TrackedField",
    "TrackedValue",
    "new_id",
    "utcnow",
]
