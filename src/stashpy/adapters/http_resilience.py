"""Async HTTP client for page fetches.

Requests go through a rate limiter, then an optional SQLite page cache, then
a retrying transport.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypedDict

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from stashpy.config import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import TimeoutTypes

    from stashpy.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

log = logging.getLogger(__name__)

_IDEMPOTENT_METHODS = ("GET", "HEAD")


class _ClientOptions(TypedDict):
    timeout: TimeoutTypes
    headers: dict[str, str]
    follow_redirects: bool
    max_redirects: int
    transport: httpx.AsyncBaseTransport


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        allowed_methods=_IDEMPOTENT_METHODS,
        status_forcelist=tuple(sorted(policy.retry_statuses)),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class ResilientClient:
    """GET-only client with retries, rate limiting and a page cache.

    ``transport`` replaces the network layer underneath the retry transport,
    which keeps the retry policy testable with ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        retry = build_retry(config.retry)
        options: _ClientOptions = {
            "timeout": config.timeout_seconds,
            "headers": dict(config.default_headers or {}),
            "follow_redirects": True,
            "max_redirects": config.max_redirects,
            "transport": (
                RetryTransport(retry=retry)
                if transport is None
                else RetryTransport(transport=transport, retry=retry)
            ),
        }

        if config.cache is None:
            self._client = httpx.AsyncClient(**options)
        else:
            self._client = AsyncCacheClient(
                **options,
                storage=_page_cache_storage(config.cache),
                policy=FilterPolicy(response_filters=[_StatusFilter(config.cache)]),
            )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url)
        async with self._limiter:
            return await self._client.get(url)


class _StatusFilter(BaseFilter[HishelCacheResponse]):
    """Keep only responses whose status the cache config accepts."""

    def __init__(self, config: CacheConfig) -> None:
        self._statuses = config.cacheable_statuses

    def needs_body(self) -> bool:
        return False

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        return item.status_code in self._statuses


def _page_cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    path = config.path or get_storage_config().http_cache_path()
    log.debug("Caching fetched pages in %s for %.0fs", path, config.ttl_seconds)
    return AsyncSqliteStorage(database_path=str(path), default_ttl=config.ttl_seconds)
