"""Pydantic models describing the browser scraper payloads."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import ClassVar, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

log = logging.getLogger(__name__)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ScraperBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Scraper %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class ScrapedItem(ScraperBaseModel):
    """One item as posted by a scraping script.

    ``platform`` is the scraper's name for the origin (``x``, ``reddit``,
    ``linkedin``); ``text`` is the visible post body.
    """

    platform: str | None = None
    external_id: str | None = Field(default=None, alias="externalId")
    url: str | None = None
    text: str | None = None
    author: str | None = None
    timestamp: datetime | None = None

    _normalize_strings = field_validator(
        "platform", "external_id", "url", "text", "author", "timestamp", mode="before"
    )(_blank_to_none)

    @model_validator(mode="before")
    @classmethod
    def _accept_aliases(cls, value: object) -> object:
        if isinstance(value, Mapping):
            data: dict[str, object] = dict(cast(Mapping[str, object], value))
            if "platform" not in data and "source" in data:
                data["platform"] = data.pop("source")
            if "text" not in data and "content" in data:
                data["text"] = data.pop("content")
            return data
        return value

    @field_validator("platform", mode="after")
    @classmethod
    def _lowercase_platform(cls, value: str | None) -> str | None:
        return value.lower() if value is not None else None

    @field_validator("timestamp", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Scrapers emit ISO strings; a missing offset is taken as UTC.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class ScrapedBatch(ScraperBaseModel):
    items: list[ScrapedItem]


type ScrapedPayloadInput = ScrapedBatch | Mapping[str, object] | Sequence[object]
