"""Settings for the HTTP client that fetches bookmarked pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

DAY_SECONDS = 24 * 60 * 60


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Transport-level retries for idempotent requests; ``total=0`` disables them."""

    total: int = 2
    backoff_factor: float = 0.5
    max_backoff_wait: float = 10.0
    retry_statuses: frozenset[int] = frozenset({429, 502, 503, 504})
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """SQLite page cache shared by every fetch.

    ``path`` defaults to the HTTP cache file in the data directory. Only
    responses with a status in ``cacheable_statuses`` are stored, so a
    transient error page is never served from the cache.
    """

    path: Path | None = None
    ttl_seconds: float = DAY_SECONDS
    cacheable_statuses: frozenset[int] = frozenset({200, 203})


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    timeout_seconds: float = 10.0
    max_redirects: int = 5
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = field(default_factory=CacheConfig)
    default_headers: Mapping[str, str] | None = None
