"""Candidate items and their normalization.

A candidate is the unvalidated description of a potential bookmark as it
arrives from a scraper payload, a URL submission or raw text. Candidates are
normalized (strings trimmed, blanks dropped, external ids derived from known
platform URLs) and validated before the engine ever looks at them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from stashpy.domain.errors import ValidationError
from stashpy.domain.model import Source

if TYPE_CHECKING:
    from datetime import datetime


_EXTERNAL_ID_PATTERNS: dict[Source, tuple[re.Pattern[str], ...]] = {
    Source.X: (re.compile(r"/status/(\d+)"),),
    Source.REDDIT: (re.compile(r"/comments/([A-Za-z0-9]+)"),),
    Source.LINKEDIN: (
        re.compile(r"urn:li:activity:(\d+)"),
        re.compile(r"activity-(\d+)"),
    ),
}


@dataclass(slots=True, frozen=True, kw_only=True)
class CandidateItem:
    source: Source
    external_id: str | None = None
    url: str | None = None
    content: str | None = None
    author: str | None = None
    timestamp: datetime | None = None


def extract_external_id(source: Source, url: str | None) -> str | None:
    """Derive the platform-specific stable id embedded in ``url``, if any."""

    if not url:
        return None
    for pattern in _EXTERNAL_ID_PATTERNS.get(source, ()):
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def normalize_candidate(candidate: CandidateItem) -> CandidateItem:
    """Return ``candidate`` with trimmed strings and a derived external id."""

    url = _clean(candidate.url)
    external_id = _clean(candidate.external_id) or extract_external_id(candidate.source, url)
    return replace(
        candidate,
        external_id=external_id,
        url=url,
        content=_clean(candidate.content),
        author=_clean(candidate.author),
    )


def validate_candidate(candidate: CandidateItem) -> CandidateItem:
    """Normalize ``candidate`` and reject it when it carries nothing to store.

    Raises:
        ValidationError: neither ``url`` nor non-blank ``content`` is present,
            or the timestamp is not timezone-aware.
    """

    normalized = normalize_candidate(candidate)
    if normalized.url is None and normalized.content is None:
        raise ValidationError("Candidate needs a url or content", field="url")
    timestamp = normalized.timestamp
    if timestamp is not None and timestamp.utcoffset() is None:
        raise ValidationError("Candidate timestamp must be timezone-aware", field="timestamp")
    return normalized


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
