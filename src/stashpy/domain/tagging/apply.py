"""Persist scoring results as tag associations.

Policy per match:
- no association: create one with ``auto_tagged=True`` and the score
- manual association: never downgraded; confidence only backfilled when null
- auto association with a lower confidence: raised to the new score
- anything else: left as is
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stashpy.domain.model import TagAssociation

from .manual import ensure_tag

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from stashpy.domain.ports import IngestRepositories

    from .catalog import TagCatalog
    from .scoring import TagMatch


log = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplyTagsResult:
    created: int = 0
    raised: int = 0
    backfilled: int = 0
    unchanged: int = 0

    @property
    def touched(self) -> int:
        return self.created + self.raised + self.backfilled


def apply_tag_matches(
    bookmark_id: UUID,
    matches: Iterable[TagMatch],
    repositories: IngestRepositories,
    catalog: TagCatalog,
) -> ApplyTagsResult:
    """Upsert auto-tag associations for ``bookmark_id`` without committing."""

    result = ApplyTagsResult()
    for match in matches:
        tag = ensure_tag(repositories, match.tag_slug, catalog)
        association = repositories.tag_associations.get(bookmark_id, tag.id)
        if association is None:
            repositories.tag_associations.add(
                TagAssociation(
                    bookmark_id=bookmark_id,
                    tag=tag,
                    auto_tagged=True,
                    confidence=match.confidence,
                )
            )
            result.created += 1
            continue

        if not association.auto_tagged:
            if association.backfill_confidence(match.confidence):
                result.backfilled += 1
            else:
                result.unchanged += 1
            continue

        if association.raise_confidence(match.confidence):
            result.raised += 1
        else:
            result.unchanged += 1

    log.debug(
        "Applied tags to %s: created=%d raised=%d backfilled=%d unchanged=%d",
        bookmark_id,
        result.created,
        result.raised,
        result.backfilled,
        result.unchanged,
    )
    return result
