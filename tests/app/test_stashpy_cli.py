from __future__ import annotations

import json
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from stashpy.domain.errors import NotFoundError, ValidationError
from stashpy.domain.model import Source
from stashpy.domain.reconciliation import (
    IngestBatchResult,
    IngestItemResult,
    IngestOutcome,
    NewClassification,
)
from stashpy.domain.tagging import TagMatch
from stashpy.ui import cli
from tests.helpers.bookmarks import make_bookmark

if TYPE_CHECKING:
    from pathlib import Path


def _new_outcome(source: Source = Source.RAW) -> IngestOutcome:
    return IngestOutcome(
        classification=NewClassification(),
        bookmark=make_bookmark(source=source, external_id=None),
    )


def test_ingest_reads_payload_and_prints_counts(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}
    payload = [{"platform": "x", "externalId": "1", "text": "hi"}]
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    def fake_ingest(received: object, **kwargs: object) -> IngestBatchResult:
        captured["payload"] = received
        captured.update(kwargs)
        return IngestBatchResult(
            items=[
                IngestItemResult(index=0, outcome=_new_outcome(Source.X)),
                IngestItemResult(index=1, error=ValidationError("bad item")),
            ]
        )

    monkeypatch.setattr(cli, "ingest_scraped_items", fake_ingest)

    cli.main(["ingest", str(path)])

    assert captured == {"payload": payload, "auto_tag": None}
    output = capsys.readouterr().out
    assert "created=1 updated=0 duplicates=0 failed=1" in output
    assert "[1] bad item" in output


def test_ingest_auto_tag_flags(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    seen: list[object] = []
    path = tmp_path / "payload.json"
    path.write_text("[]", encoding="utf-8")

    def fake_ingest(_payload: object, *, auto_tag: bool | None) -> IngestBatchResult:
        seen.append(auto_tag)
        return IngestBatchResult()

    monkeypatch.setattr(cli, "ingest_scraped_items", fake_ingest)

    cli.main(["ingest", str(path), "--auto-tag"])
    cli.main(["ingest", str(path), "--no-auto-tag"])

    assert seen == [True, False]


def test_ingest_invalid_json_exits_with_usage_error(tmp_path: Path) -> None:
    path = tmp_path / "payload.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["ingest", str(path)])

    assert excinfo.value.code == 2


def test_missing_file_exits_with_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["check", str(tmp_path / "missing.json")])

    assert excinfo.value.code == 2


def test_add_raw_from_text(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    outcome = _new_outcome()
    received: list[str] = []

    def fake_add_raw(content: str, *, auto_tag: bool | None) -> IngestOutcome:
        received.append(content)
        return outcome

    monkeypatch.setattr(cli, "add_raw_text", fake_add_raw)

    cli.main(["add-raw", "--text", "a quick note"])

    assert received == ["a quick note"]
    assert capsys.readouterr().out.strip() == f"new {outcome.bookmark.id}"


def test_add_raw_requires_text_or_file() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["add-raw"])

    assert excinfo.value.code == 2


def test_add_url_validation_error_exits_2(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_add_url(url: str, *, auto_tag: bool | None) -> IngestOutcome:
        raise ValidationError(f"Not an http(s) URL: {url}", field="url")

    monkeypatch.setattr(cli, "add_url", fake_add_url)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["add-url", "ftp://example.com"])

    assert excinfo.value.code == 2


def test_domain_error_exits_1(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_add_manual_tag(_bookmark_id: object, slug: str) -> None:
        raise NotFoundError("tag", slug)

    monkeypatch.setattr(cli, "add_manual_tag", fake_add_manual_tag)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["tags", "add", str(uuid4()), "missing"])

    assert excinfo.value.code == 1


def test_tags_show_rejects_invalid_uuid() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["tags", "show", "not-a-uuid"])

    assert excinfo.value.code == 2


def test_tags_copy_passes_repeated_slugs(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    source_id, target_id = uuid4(), uuid4()

    def fake_copy(source: object, target: object, slugs: list[str] | None) -> list[object]:
        captured.update(source=source, target=target, slugs=slugs)
        return []

    monkeypatch.setattr(cli, "copy_tags", fake_copy)

    cli.main(["tags", "copy", str(source_id), str(target_id), "--slug", "a", "--slug", "b"])

    assert captured == {"source": source_id, "target": target_id, "slugs": ["a", "b"]}


def test_tags_score_without_apply_does_not_write(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def fake_score(_bookmark_id: object) -> list[TagMatch]:
        return [
            TagMatch(
                tag_slug="ai-ml",
                tag_name="ai/ml",
                confidence=0.413,
                matched_keywords=("machine learning", "neural network"),
            )
        ]

    def fail_apply(_bookmark_id: object) -> None:
        raise AssertionError("must not apply without --apply")

    monkeypatch.setattr(cli, "score_bookmark", fake_score)
    monkeypatch.setattr(cli, "auto_tag_bookmark", fail_apply)

    cli.main(["tags", "score", str(uuid4())])

    assert capsys.readouterr().out.strip() == "ai-ml\t0.41\tmachine learning, neural network"
