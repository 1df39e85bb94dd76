# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from stashpy.app import (
    add_manual_tag,
    add_raw_text,
    add_url,
    auto_tag_bookmark,
    bookmark_tags,
    classify_scraped_items,
    copy_tags,
    create_tag,
    ingest_scraped_items,
    initialize_default_tags,
    list_tags_with_counts,
    remove_tag,
    score_bookmark,
)
from stashpy.config import configure_logging
from stashpy.domain.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from stashpy.adapters.scraper import ScrapedPayloadInput
    from stashpy.domain.reconciliation import BatchOutcome, IngestBatchResult, IngestOutcome

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Collect and tag bookmarks")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Ingest a scraper JSON payload")
    ingest.add_argument("file", type=str, help="Path to the JSON payload ('-' for stdin)")
    _add_auto_tag_flags(ingest)

    check = subparsers.add_parser(
        "check",
        help="Report which items of a scraper payload are already stored",
    )
    check.add_argument("file", type=str, help="Path to the JSON payload ('-' for stdin)")

    url = subparsers.add_parser("add-url", help="Fetch a web page and store it")
    url.add_argument("url", type=str, help="http(s) URL to fetch")
    _add_auto_tag_flags(url)

    raw = subparsers.add_parser("add-raw", help="Store raw text or markdown")
    raw_input = raw.add_mutually_exclusive_group(required=True)
    raw_input.add_argument("--text", type=str, help="Text to store")
    raw_input.add_argument("--file", type=str, help="File whose contents to store")
    _add_auto_tag_flags(raw)

    tags = subparsers.add_parser("tags", help="Tag management commands")
    tags_sub = tags.add_subparsers(dest="tags_command", required=True)

    tags_sub.add_parser("init", help="Seed the default tags into an empty store")
    tags_sub.add_parser("list", help="List tags with bookmark counts")

    tags_show = tags_sub.add_parser("show", help="List the tags of a bookmark")
    tags_show.add_argument("bookmark_id", type=str, help="Bookmark id")

    tags_score = tags_sub.add_parser("score", help="Score a bookmark against the tag catalog")
    tags_score.add_argument("bookmark_id", type=str, help="Bookmark id")
    tags_score.add_argument(
        "--apply",
        action="store_true",
        help="Persist the matches as automatic tags",
    )

    tags_add = tags_sub.add_parser("add", help="Tag a bookmark manually")
    tags_add.add_argument("bookmark_id", type=str, help="Bookmark id")
    tags_add.add_argument("slug", type=str, help="Tag slug")

    tags_remove = tags_sub.add_parser("remove", help="Remove a tag from a bookmark")
    tags_remove.add_argument("bookmark_id", type=str, help="Bookmark id")
    tags_remove.add_argument("slug", type=str, help="Tag slug")

    tags_copy = tags_sub.add_parser("copy", help="Copy tags between bookmarks as manual tags")
    tags_copy.add_argument("source_id", type=str, help="Bookmark to copy from")
    tags_copy.add_argument("target_id", type=str, help="Bookmark to copy to")
    tags_copy.add_argument(
        "--slug",
        dest="slugs",
        action="append",
        help="Only copy this tag (repeatable)",
    )

    tags_create = tags_sub.add_parser("create", help="Create a tag")
    tags_create.add_argument("--name", type=str, required=True, help="Display name")
    tags_create.add_argument("--slug", type=str, required=True, help="Lowercase slug")
    tags_create.add_argument("--description", type=str, help="Optional description")
    tags_create.add_argument("--color", type=str, help="Optional #rgb or #rrggbb color")

    return parser.parse_args(list(argv))


def _add_auto_tag_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--auto-tag",
        dest="auto_tag",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Score and tag stored bookmarks (defaults to STASHPY_AUTO_TAG)",
    )


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc


def _read_payload(path: str) -> ScrapedPayloadInput:
    try:
        return json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def _print_batch(result: IngestBatchResult) -> None:
    print(
        f"created={result.created} updated={result.updated} "
        f"duplicates={result.duplicates} failed={result.failed}"
    )
    for index, error in result.errors():
        print(f"  [{index}] {error}")


def _print_outcome(outcome: IngestOutcome) -> None:
    print(f"{outcome.kind} {outcome.bookmark.id}")


def _print_check(outcomes: list[BatchOutcome]) -> None:
    for outcome in outcomes:
        if outcome.classification is None:
            print(f"{outcome.index}\terror\t{outcome.error}")
        else:
            print(f"{outcome.index}\t{outcome.classification.kind}")


def _run_tags_command(args: argparse.Namespace) -> None:
    command = args.tags_command
    if command == "init":
        created = initialize_default_tags()
        print(f"Initialized {len(created)} tags")
    elif command == "list":
        for entry in list_tags_with_counts():
            print(f"{entry.tag.slug}\t{entry.tag.name}\t{entry.bookmark_count}")
    elif command == "show":
        for association in bookmark_tags(_parse_uuid(args.bookmark_id)):
            origin = "auto" if association.auto_tagged else "manual"
            confidence = (
                f"{association.confidence:.2f}" if association.confidence is not None else "-"
            )
            print(f"{association.slug}\t{origin}\t{confidence}")
    elif command == "score":
        bookmark_id = _parse_uuid(args.bookmark_id)
        for match in score_bookmark(bookmark_id):
            print(f"{match.tag_slug}\t{match.confidence:.2f}\t{', '.join(match.matched_keywords)}")
        if args.apply:
            result = auto_tag_bookmark(bookmark_id)
            print(
                f"created={result.created} raised={result.raised} "
                f"backfilled={result.backfilled} unchanged={result.unchanged}"
            )
    elif command == "add":
        add_manual_tag(_parse_uuid(args.bookmark_id), args.slug)
        print(f"Tagged {args.bookmark_id} with {args.slug}")
    elif command == "remove":
        removed = remove_tag(_parse_uuid(args.bookmark_id), args.slug)
        print(f"Removed {args.slug}" if removed else f"{args.bookmark_id} has no tag {args.slug}")
    elif command == "copy":
        copied = copy_tags(_parse_uuid(args.source_id), _parse_uuid(args.target_id), args.slugs)
        print(f"Copied {len(copied)} tags")
    elif command == "create":
        tag = create_tag(
            name=args.name,
            slug=args.slug,
            description=args.description,
            color=args.color,
        )
        print(f"Created tag {tag.slug} ({tag.id})")
    else:
        raise ValueError(f"Unsupported tags command: {command}")


def _run_command(args: argparse.Namespace) -> None:
    if args.command == "ingest":
        _print_batch(ingest_scraped_items(_read_payload(args.file), auto_tag=args.auto_tag))
    elif args.command == "check":
        _print_check(classify_scraped_items(_read_payload(args.file)))
    elif args.command == "add-url":
        _print_outcome(add_url(args.url, auto_tag=args.auto_tag))
    elif args.command == "add-raw":
        content = args.text if args.text is not None else _read_text(args.file)
        _print_outcome(add_raw_text(content, auto_tag=args.auto_tag))
    elif args.command == "tags":
        _run_tags_command(args)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        _run_command(parsed_args)
    except (ValueError, ValidationError):
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
