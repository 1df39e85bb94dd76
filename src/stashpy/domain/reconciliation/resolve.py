"""Identity resolution of candidates against stored bookmarks.

Lookup order is strict:
1) ``(source, external_id)`` when the candidate has an external id
2) ``url`` when present; the earliest ingested bookmark wins

A miss on both keys (or a candidate with neither, such as raw text) resolves
to nothing, which the engine classifies as NEW.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .contracts import MatchKind

if TYPE_CHECKING:
    from stashpy.domain.model import Bookmark
    from stashpy.domain.ports import BookmarkLookup

    from .candidates import CandidateItem


log = logging.getLogger(__name__)


def resolve_existing(
    candidate: CandidateItem,
    lookup: BookmarkLookup,
) -> tuple[Bookmark, MatchKind] | None:
    """Find the stored bookmark ``candidate`` refers to, if any."""

    if candidate.external_id is not None:
        existing = lookup.find_by_source_and_external_id(candidate.source, candidate.external_id)
        if existing is not None:
            return existing, MatchKind.EXTERNAL_ID
        log.debug(
            "No bookmark for %s/%s, falling back to url", candidate.source, candidate.external_id
        )

    if candidate.url is not None:
        existing = lookup.find_by_url(candidate.url)
        if existing is not None:
            return existing, MatchKind.URL

    return None
