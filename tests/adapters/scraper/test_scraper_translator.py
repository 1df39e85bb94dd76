from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from stashpy.adapters.scraper import (
    ScrapedBatch,
    ScrapedItem,
    parse_payload,
    resolve_source,
    translate_item,
    translate_payload,
)
from stashpy.domain.errors import ValidationError
from stashpy.domain.model import Source
from stashpy.domain.reconciliation import CandidateItem


@pytest.mark.parametrize(
    ("platform", "expected"),
    [
        ("x", Source.X),
        ("twitter", Source.X),
        ("reddit", Source.REDDIT),
        ("linkedin", Source.LINKEDIN),
        ("raw", Source.RAW),
        ("mastodon", Source.URL),
        (None, Source.URL),
    ],
)
def test_resolve_source(platform: str | None, expected: Source) -> None:
    assert resolve_source(platform) is expected


def test_scraped_item_normalizes_fields() -> None:
    item = ScrapedItem.model_validate(
        {
            "platform": " X ",
            "url": "https://x.com/someone/status/123",
            "text": "  ",
            "author": "@someone",
            "timestamp": "2025-03-01T10:00:00",
        }
    )

    assert item.platform == "x"
    assert item.text is None
    assert item.timestamp == datetime(2025, 3, 1, 10, 0, tzinfo=UTC)


def test_scraped_item_accepts_alternate_keys() -> None:
    item = ScrapedItem.model_validate(
        {"source": "reddit", "content": "A post", "externalId": "abc123"}
    )

    assert item.platform == "reddit"
    assert item.text == "A post"
    assert item.external_id == "abc123"


def test_scraped_item_logs_unmodeled_keys_once(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="stashpy.adapters.scraper.schema"):
        ScrapedItem.model_validate({"platform": "x", "likesCountForLogTest": 3})
        ScrapedItem.model_validate({"platform": "x", "likesCountForLogTest": 4})

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["Scraper ScrapedItem: unmodeled keys: likesCountForLogTest"]


def test_translate_item_builds_candidate() -> None:
    candidate = translate_item(
        {
            "platform": "x",
            "url": "https://x.com/someone/status/123",
            "text": "Hello",
            "author": "@someone",
            "timestamp": "2025-03-01T10:00:00+00:00",
        }
    )

    assert candidate == CandidateItem(
        source=Source.X,
        external_id=None,
        url="https://x.com/someone/status/123",
        content="Hello",
        author="@someone",
        timestamp=datetime(2025, 3, 1, 10, 0, tzinfo=UTC),
    )


def test_parse_payload_accepts_list_object_and_batch() -> None:
    raw_items = [{"platform": "x", "text": "one"}, {"platform": "reddit", "text": "two"}]

    from_list = parse_payload(raw_items)
    from_object = parse_payload({"items": raw_items})
    from_batch = parse_payload(ScrapedBatch.model_validate({"items": raw_items}))

    for parsed in (from_list, from_object, from_batch):
        assert [item.text for item in parsed if isinstance(item, ScrapedItem)] == ["one", "two"]


def test_parse_payload_reports_malformed_items_in_place() -> None:
    parsed = parse_payload(
        [
            {"platform": "x", "text": "fine"},
            {"platform": "x", "timestamp": "not a date"},
            "not an object",
            {"platform": "reddit", "url": 123},
        ]
    )

    assert isinstance(parsed[0], ScrapedItem)
    for rejected in parsed[1:]:
        assert isinstance(rejected, ValidationError)
        assert rejected.field == "items"


@pytest.mark.parametrize("payload", [{"platform": "x"}, {"items": "nope"}, "not a payload"])
def test_parse_payload_rejects_malformed_envelope(payload: object) -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_payload(payload)  # type: ignore[arg-type]

    assert excinfo.value.field == "items"


def test_translate_payload_keeps_rejected_positions() -> None:
    translated = translate_payload(
        [{"platform": "x", "timestamp": "yesterday-ish"}, {"platform": "x", "text": "ok"}]
    )

    assert [item.index for item in translated] == [0, 1]
    assert translated[0].candidate is None
    assert isinstance(translated[0].error, ValidationError)
    assert translated[1].error is None
    assert translated[1].candidate is not None
    assert translated[1].candidate.content == "ok"


def test_translate_payload_keeps_order() -> None:
    translated = translate_payload(
        [
            {"platform": "linkedin", "url": "https://linkedin.com/feed/update/urn:li:activity:9"},
            {"text": "plain page", "url": "https://example.com"},
        ]
    )

    assert [item.candidate.source for item in translated if item.candidate] == [
        Source.LINKEDIN,
        Source.URL,
    ]
