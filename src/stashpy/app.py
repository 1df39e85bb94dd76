"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from operator import attrgetter
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from stashpy.adapters.scraper import translate_payload
from stashpy.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from stashpy.adapters.url_fetcher import HttpUrlContentFetcher
from stashpy.config import get_ingest_config, get_tagging_config
from stashpy.domain import tagging
from stashpy.domain.errors import NotFoundError, ValidationError
from stashpy.domain.model import Source, utcnow
from stashpy.domain.reconciliation import (
    BatchOutcome,
    CandidateItem,
    ClassificationKind,
    IngestBatchResult,
    IngestItemResult,
    ReconciliationEngine,
    ingest_batch,
)
from stashpy.domain.reconciliation import ingest_candidate as ingest_one
from stashpy.domain.tagging import TagScoringEngine, apply_tag_matches

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from uuid import UUID

    from stashpy.adapters.scraper import ScrapedPayloadInput, TranslatedItem
    from stashpy.config import IngestConfig, TaggingConfig
    from stashpy.domain.model import Bookmark, Tag, TagAssociation
    from stashpy.domain.ports import (
        FetchedContent,
        IngestRepositories,
        TagCount,
        UrlContentFetcher,
    )
    from stashpy.domain.reconciliation import IngestOutcome
    from stashpy.domain.reconciliation.engine import Clock
    from stashpy.domain.reconciliation.persist import PersistedHook, UnitOfWorkFactory
    from stashpy.domain.tagging import ApplyTagsResult, TagMatch


log = getLogger(__name__)

_FETCHABLE_SCHEMES = frozenset({"http", "https"})


def classify_candidates(
    candidates: Iterable[CandidateItem],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[BatchOutcome]:
    """Classify candidates against the store without writing anything."""

    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        engine = ReconciliationEngine(lookup=uow.repositories.bookmarks)
        outcomes = engine.classify_batch(candidates)

    stored = [
        outcome
        for outcome in outcomes
        if outcome.classification is not None
        and outcome.classification.kind is not ClassificationKind.NEW
    ]
    log.info("Checked %d candidates: %d already stored", len(outcomes), len(stored))
    return outcomes


def classify_scraped_items(
    payload: ScrapedPayloadInput,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[BatchOutcome]:
    """Classify scraper items without writing; rejected items keep their index.

    Raises:
        ValidationError: the payload is neither a list nor an object with items.
    """

    translated = translate_payload(payload)
    positions, candidates = _accepted_candidates(translated)
    outcomes = [
        replace(outcome, index=positions[outcome.index])
        for outcome in classify_candidates(candidates, unit_of_work_factory=unit_of_work_factory)
    ]
    outcomes.extend(
        BatchOutcome(index=item.index, error=item.error)
        for item in translated
        if item.error is not None
    )
    return sorted(outcomes, key=attrgetter("index"))


def ingest_candidates(
    candidates: Iterable[CandidateItem],
    *,
    auto_tag: bool | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    ingest_config: IngestConfig | None = None,
    tagging_config: TaggingConfig | None = None,
    clock: Clock = utcnow,
) -> IngestBatchResult:
    """Ingest candidates in order, one unit of work per candidate."""

    config = ingest_config or get_ingest_config()
    return ingest_batch(
        candidates,
        unit_of_work_factory=_resolve_unit_of_work_factory(unit_of_work_factory),
        max_attempts=config.max_attempts,
        clock=clock,
        on_persisted=_auto_tag_hook(auto_tag, config, tagging_config),
    )


def ingest_candidate(
    candidate: CandidateItem,
    *,
    auto_tag: bool | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    ingest_config: IngestConfig | None = None,
    tagging_config: TaggingConfig | None = None,
    clock: Clock = utcnow,
) -> IngestOutcome:
    config = ingest_config or get_ingest_config()
    return ingest_one(
        candidate,
        unit_of_work_factory=_resolve_unit_of_work_factory(unit_of_work_factory),
        max_attempts=config.max_attempts,
        clock=clock,
        on_persisted=_auto_tag_hook(auto_tag, config, tagging_config),
    )


def ingest_scraped_items(
    payload: ScrapedPayloadInput,
    *,
    auto_tag: bool | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    ingest_config: IngestConfig | None = None,
    tagging_config: TaggingConfig | None = None,
) -> IngestBatchResult:
    """Validate a scraper payload and ingest its items.

    Items that do not match the scraper schema are reported as failures at
    their index; the rest of the payload is still ingested.

    Raises:
        ValidationError: the payload is neither a list nor an object with items.
    """

    translated = translate_payload(payload)
    positions, candidates = _accepted_candidates(translated)
    log.info(
        "Ingesting %d scraped items, %d rejected by the schema",
        len(candidates),
        len(translated) - len(candidates),
    )
    result = ingest_candidates(
        candidates,
        auto_tag=auto_tag,
        unit_of_work_factory=unit_of_work_factory,
        ingest_config=ingest_config,
        tagging_config=tagging_config,
    )
    items = [replace(item, index=positions[item.index]) for item in result.items]
    items.extend(
        IngestItemResult(index=item.index, error=item.error)
        for item in translated
        if item.error is not None
    )
    return IngestBatchResult(items=sorted(items, key=attrgetter("index")))


def add_url(
    url: str,
    *,
    fetcher: UrlContentFetcher | None = None,
    auto_tag: bool | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    ingest_config: IngestConfig | None = None,
    tagging_config: TaggingConfig | None = None,
) -> IngestOutcome:
    """Fetch ``url`` and store its page text as a ``url`` bookmark.

    Raises:
        ValidationError: ``url`` is blank or not an http(s) URL.
        UpstreamFetchError: the page could not be fetched.
    """

    cleaned = url.strip()
    if not cleaned:
        raise ValidationError("URL is required", field="url")
    parts = urlsplit(cleaned)
    if parts.scheme.lower() not in _FETCHABLE_SCHEMES or not parts.netloc:
        raise ValidationError(f"Not an http(s) URL: {cleaned}", field="url")

    effective_fetcher = fetcher or HttpUrlContentFetcher()
    fetched = effective_fetcher(cleaned)
    candidate = CandidateItem(
        source=Source.URL,
        url=fetched.url or cleaned,
        content=_page_text(fetched),
    )
    return ingest_candidate(
        candidate,
        auto_tag=auto_tag,
        unit_of_work_factory=unit_of_work_factory,
        ingest_config=ingest_config,
        tagging_config=tagging_config,
    )


def add_raw_text(
    content: str,
    *,
    auto_tag: bool | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    ingest_config: IngestConfig | None = None,
    tagging_config: TaggingConfig | None = None,
) -> IngestOutcome:
    """Store free text as a ``raw`` bookmark.

    Raw text carries neither url nor external id, so every call creates a
    new bookmark.
    """

    return ingest_candidate(
        CandidateItem(source=Source.RAW, content=content),
        auto_tag=auto_tag,
        unit_of_work_factory=unit_of_work_factory,
        ingest_config=ingest_config,
        tagging_config=tagging_config,
    )


def score_bookmark(
    bookmark_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    tagging_config: TaggingConfig | None = None,
) -> list[TagMatch]:
    """Score a stored bookmark's content without touching its tags."""

    config = tagging_config or get_tagging_config()
    engine = TagScoringEngine(config.catalog, min_confidence=config.min_confidence)
    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        bookmark = _require_bookmark(uow.repositories, bookmark_id)
        return engine.score(bookmark.content)


def auto_tag_bookmark(
    bookmark_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    tagging_config: TaggingConfig | None = None,
) -> ApplyTagsResult:
    """Score a stored bookmark and persist the resulting tag associations."""

    config = tagging_config or get_tagging_config()
    engine = TagScoringEngine(config.catalog, min_confidence=config.min_confidence)

    def operation(repositories: IngestRepositories) -> ApplyTagsResult:
        bookmark = _require_bookmark(repositories, bookmark_id)
        matches = engine.score(bookmark.content)
        return apply_tag_matches(bookmark.id, matches, repositories, config.catalog)

    result = _run(operation, unit_of_work_factory)
    log.info("Auto-tagged bookmark %s: %d associations touched", bookmark_id, result.touched)
    return result


def create_tag(
    *,
    name: str,
    slug: str,
    description: str | None = None,
    color: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Tag:
    return _run(
        lambda repositories: tagging.create_tag(
            repositories, name=name, slug=slug, description=description, color=color
        ),
        unit_of_work_factory,
    )


def initialize_default_tags(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    tagging_config: TaggingConfig | None = None,
) -> list[Tag]:
    catalog = (tagging_config or get_tagging_config()).catalog
    return _run(
        lambda repositories: tagging.initialize_default_tags(repositories, catalog),
        unit_of_work_factory,
    )


def list_tags_with_counts(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[TagCount]:
    return _run(tagging.list_tags_with_counts, unit_of_work_factory, commit=False)


def bookmark_tags(
    bookmark_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[TagAssociation]:
    return _run(
        lambda repositories: tagging.bookmark_tags(repositories, bookmark_id),
        unit_of_work_factory,
        commit=False,
    )


def add_manual_tag(
    bookmark_id: UUID,
    slug: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> TagAssociation:
    return _run(
        lambda repositories: tagging.add_manual_tag(repositories, bookmark_id, slug),
        unit_of_work_factory,
    )


def remove_tag(
    bookmark_id: UUID,
    slug: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    return _run(
        lambda repositories: tagging.remove_tag(repositories, bookmark_id, slug),
        unit_of_work_factory,
    )


def copy_tags(
    source_bookmark_id: UUID,
    target_bookmark_id: UUID,
    slugs: Iterable[str] | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[TagAssociation]:
    wanted = list(slugs) if slugs is not None else None
    return _run(
        lambda repositories: tagging.copy_tags(
            repositories, source_bookmark_id, target_bookmark_id, wanted
        ),
        unit_of_work_factory,
    )


def _accepted_candidates(
    translated: list[TranslatedItem],
) -> tuple[list[int], list[CandidateItem]]:
    positions: list[int] = []
    candidates: list[CandidateItem] = []
    for item in translated:
        if item.candidate is not None:
            positions.append(item.index)
            candidates.append(item.candidate)
    return positions, candidates

def _resolve_unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def _run[TResult](
    operation: Callable[[IngestRepositories], TResult],
    unit_of_work_factory: UnitOfWorkFactory | None,
    *,
    commit: bool = True,
) -> TResult:
    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        result = operation(uow.repositories)
        if commit:
            uow.commit()
    return result


def _auto_tag_hook(
    auto_tag: bool | None,
    ingest_config: IngestConfig,
    tagging_config: TaggingConfig | None,
) -> PersistedHook | None:
    enabled = ingest_config.auto_tag if auto_tag is None else auto_tag
    if not enabled:
        return None

    config = tagging_config or get_tagging_config()
    engine = TagScoringEngine(config.catalog, min_confidence=config.min_confidence)

    def hook(bookmark: Bookmark, repositories: IngestRepositories) -> None:
        matches = engine.score(bookmark.content)
        if matches:
            apply_tag_matches(bookmark.id, matches, repositories, config.catalog)

    return hook


def _require_bookmark(repositories: IngestRepositories, bookmark_id: UUID) -> Bookmark:
    bookmark = repositories.bookmarks.get(bookmark_id)
    if bookmark is None:
        raise NotFoundError("bookmark", bookmark_id)
    return bookmark


def _page_text(fetched: FetchedContent) -> str | None:
    # Bookmarks have no title column; the page title leads the stored text.
    parts = [part for part in (fetched.title, fetched.content) if part]
    return "\n\n".join(parts) or None
