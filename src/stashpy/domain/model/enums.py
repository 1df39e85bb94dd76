"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Source(StrEnum):
    """Origin of a bookmark."""

    X = "x"
    LINKEDIN = "linkedin"
    REDDIT = "reddit"
    URL = "url"
    RAW = "raw"


class TrackedField(StrEnum):
    """Bookmark fields compared during change detection."""

    CONTENT = "content"
    AUTHOR = "author"
    SOURCE_CREATED_AT = "source_created_at"
