"""Translate scraper payloads into reconciliation candidates."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, cast

import pydantic

from stashpy.domain.errors import ValidationError
from stashpy.domain.model import Source
from stashpy.domain.reconciliation import CandidateItem

from .schema import ScrapedBatch, ScrapedItem

if TYPE_CHECKING:
    from .schema import ScrapedPayloadInput

log = getLogger(__name__)

_PLATFORM_SOURCES: dict[str, Source] = {
    "x": Source.X,
    "twitter": Source.X,
    "reddit": Source.REDDIT,
    "linkedin": Source.LINKEDIN,
    "url": Source.URL,
    "raw": Source.RAW,
}


def resolve_source(platform: str | None) -> Source:
    """Map a scraper platform name to a :class:`Source`.

    Items without a recognized platform are stored as plain ``url`` bookmarks.
    """

    if platform is None:
        return Source.URL
    source = _PLATFORM_SOURCES.get(platform)
    if source is None:
        log.debug("Unknown platform %r, treating item as url", platform)
        return Source.URL
    return source


def translate_item(item: ScrapedItem | Mapping[str, object]) -> CandidateItem:
    scraped = _ensure_item(item)
    return CandidateItem(
        source=resolve_source(scraped.platform),
        external_id=scraped.external_id,
        url=scraped.url,
        content=scraped.text,
        author=scraped.author,
        timestamp=scraped.timestamp,
    )


@dataclass(slots=True, frozen=True)
class TranslatedItem:
    """One payload item at its position, translated or rejected."""

    index: int
    candidate: CandidateItem | None = None
    error: ValidationError | None = None


def parse_payload(payload: ScrapedPayloadInput) -> list[ScrapedItem | ValidationError]:
    """Validate each item of a payload on its own.

    A malformed item comes back as a :class:`ValidationError` at its position
    so the remaining items can still be ingested.

    Raises:
        ValidationError: the payload is neither a list nor an object with an
            ``items`` list.
    """

    return [_parse_item(index, item) for index, item in enumerate(_payload_items(payload))]


def translate_payload(payload: ScrapedPayloadInput) -> list[TranslatedItem]:
    translated: list[TranslatedItem] = []
    for index, parsed in enumerate(parse_payload(payload)):
        if isinstance(parsed, ValidationError):
            translated.append(TranslatedItem(index=index, error=parsed))
        else:
            translated.append(TranslatedItem(index=index, candidate=translate_item(parsed)))
    rejected = sum(1 for item in translated if item.error is not None)
    log.debug("Translated %d scraped items, %d rejected", len(translated), rejected)
    return translated


def _payload_items(payload: ScrapedPayloadInput) -> Sequence[object]:
    if isinstance(payload, ScrapedBatch):
        return payload.items
    if isinstance(payload, Mapping):
        items = payload.get("items")
        if isinstance(items, list):
            return cast("list[object]", items)
        raise ValidationError("Scraper payload object must carry an items list", field="items")
    if isinstance(payload, (list, tuple)):
        return cast("Sequence[object]", payload)
    raise ValidationError("Scraper payload must be a list or an object with items", field="items")


def _parse_item(index: int, item: object) -> ScrapedItem | ValidationError:
    if isinstance(item, ScrapedItem):
        return item
    if not isinstance(item, Mapping):
        log.warning("Rejected scraped item %d: not an object", index)
        return ValidationError(f"Item {index} is not an object", field="items")
    try:
        return ScrapedItem.model_validate(item)
    except pydantic.ValidationError as exc:
        log.warning("Rejected scraped item %d: %d schema errors", index, exc.error_count())
        return ValidationError(f"Malformed item {index}: {exc}", field="items")


def _ensure_item(item: ScrapedItem | Mapping[str, object]) -> ScrapedItem:
    if isinstance(item, ScrapedItem):
        return item
    return ScrapedItem.model_validate(item)
