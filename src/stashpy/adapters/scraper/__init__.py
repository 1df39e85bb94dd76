"""Public interface for the browser scraper adapter."""

from __future__ import annotations

from .schema import ScrapedBatch, ScrapedItem, ScrapedPayloadInput
from .translator import (
    TranslatedItem,
    parse_payload,
    resolve_source,
    translate_item,
    translate_payload,
)

__all__ = [
    "ScrapedBatch",
    "ScrapedItem",
    "ScrapedPayloadInput",
    "TranslatedItem",
    "parse_payload",
    "resolve_source",
    "translate_item",
    "translate_payload",
]
