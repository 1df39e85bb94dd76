"""Keyword-based tag scoring.

Content is matched against every definition of a :class:`TagCatalog`. A
keyword matches when it is a literal substring of the lowercased content, or,
for keywords made of several words, when each of its words appears among the
content's word tokens regardless of order. The second rule lets "machine
learning" match "learning from machine data" and accepts the occasional
false positive from unrelated co-occurring words.

Confidence combines keyword density, absolute match count and content length::

    keyword_ratio = matched / total_keywords
    match_boost = min(matched * 0.1, 0.3)
    length_normalizer = min(len(content) / 500, 1)
    confidence = (keyword_ratio * 0.7 + match_boost * 0.3) * (0.5 + length_normalizer * 0.5)

Matches below ``min_confidence`` are discarded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .catalog import TagCatalog, TagDefinition


MIN_CONFIDENCE_THRESHOLD = 0.3
MIN_WORD_LENGTH = 3
FULL_LENGTH_CHARS = 500

_WORD_RE = re.compile(r"[^\W_]+")


@dataclass(slots=True, frozen=True)
class TagMatch:
    tag_slug: str
    tag_name: str
    confidence: float
    matched_keywords: tuple[str, ...]


def extract_words(text: str) -> list[str]:
    """Split ``text`` on non-alphanumeric characters, dropping words shorter than 3."""

    return [word for word in _WORD_RE.findall(text.lower()) if len(word) >= MIN_WORD_LENGTH]


def calculate_confidence(matched: int, total_keywords: int, content_length: int) -> float:
    if matched <= 0 or total_keywords <= 0:
        return 0.0
    keyword_ratio = matched / total_keywords
    match_boost = min(matched * 0.1, 0.3)
    length_normalizer = min(content_length / FULL_LENGTH_CHARS, 1.0)
    confidence = (keyword_ratio * 0.7 + match_boost * 0.3) * (0.5 + length_normalizer * 0.5)
    return min(max(confidence, 0.0), 1.0)


class TagScoringEngine:
    """Score free-form text against an injected tag catalog."""

    def __init__(
        self,
        catalog: TagCatalog,
        *,
        min_confidence: float = MIN_CONFIDENCE_THRESHOLD,
    ) -> None:
        if not 0.0 <= min_confidence <= 1.0:
            raise ValueError("min_confidence must be between 0 and 1")
        self.catalog = catalog
        self.min_confidence = min_confidence

    def score(self, content: str | None) -> list[TagMatch]:
        """Return matches ranked by confidence, highest first.

        Equal confidences keep catalog order. Empty or whitespace-only content
        yields an empty list.
        """

        if not content or not content.strip():
            return []

        normalized = content.lower().strip()
        words = frozenset(extract_words(content))
        matches: list[TagMatch] = []
        for definition in self.catalog:
            matched = _matched_keywords(definition, normalized, words)
            if not matched:
                continue
            confidence = calculate_confidence(len(matched), len(definition.keywords), len(content))
            if confidence < self.min_confidence:
                continue
            matches.append(
                TagMatch(
                    tag_slug=definition.slug,
                    tag_name=definition.name,
                    confidence=confidence,
                    matched_keywords=matched,
                )
            )

        matches.sort(key=lambda match: match.confidence, reverse=True)
        return matches


def keyword_matches(keyword: str, normalized_content: str, words: frozenset[str]) -> bool:
    normalized_keyword = keyword.lower().strip()
    if normalized_keyword and normalized_keyword in normalized_content:
        return True
    parts = _WORD_RE.findall(normalized_keyword)
    if len(parts) < 2:
        return False
    keyword_words = [part for part in parts if len(part) >= MIN_WORD_LENGTH]
    return bool(keyword_words) and all(word in words for word in keyword_words)


def _matched_keywords(
    definition: TagDefinition,
    normalized_content: str,
    words: frozenset[str],
) -> tuple[str, ...]:
    matched: dict[str, None] = {}
    for keyword in definition.keywords:
        if keyword not in matched and keyword_matches(keyword, normalized_content, words):
            matched[keyword] = None
    return tuple(matched)
