"""Ports for fetching external content."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(slots=True, frozen=True)
class FetchedContent:
    """Readable content extracted from a remote page."""

    url: str
    title: str | None = None
    content: str | None = None


@runtime_checkable
class UrlContentFetcher(Protocol):
    """Callable port for retrieving page content.

    Implementations raise :class:`~stashpy.domain.errors.UpstreamFetchError` on
    any transport or HTTP status failure.
    """

    def __call__(self, url: str) -> FetchedContent: ...


__all__ = ["FetchedContent", "UrlContentFetcher"]
