"""Keyword tag scoring and tag management."""

from __future__ import annotations

from .apply import ApplyTagsResult, apply_tag_matches
from .catalog import DEFAULT_TAG_DEFINITIONS, TagCatalog, TagDefinition, default_tag_catalog
from .manual import (
    add_manual_tag,
    bookmark_tags,
    copy_tags,
    create_tag,
    ensure_tag,
    initialize_default_tags,
    list_tags_with_counts,
    remove_tag,
    validate_tag_fields,
)
from .scoring import MIN_CONFIDENCE_THRESHOLD, TagMatch, TagScoringEngine, extract_words

__all__ = [
    "DEFAULT_TAG_DEFINITIONS",
    "MIN_CONFIDENCE_THRESHOLD",
    "ApplyTagsResult",
    "TagCatalog",
    "TagDefinition",
    "TagMatch",
    "TagScoringEngine",
    "add_manual_tag",
    "apply_tag_matches",
    "bookmark_tags",
    "copy_tags",
    "create_tag",
    "default_tag_catalog",
    "ensure_tag",
    "extract_words",
    "initialize_default_tags",
    "list_tags_with_counts",
    "remove_tag",
    "validate_tag_fields",
]
