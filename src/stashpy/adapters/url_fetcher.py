"""Fetch a web page and extract its readable title and text."""

from __future__ import annotations

import asyncio
import re
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from bs4 import BeautifulSoup, Tag

from stashpy.adapters.http_resilience import ResilientClient
from stashpy.config.url_fetch import get_url_fetch_config
from stashpy.domain.errors import UpstreamFetchError
from stashpy.domain.ports import FetchedContent

if TYPE_CHECKING:
    from collections.abc import Callable

    from stashpy.config.http_resilience import ResilienceConfig
    from stashpy.config.url_fetch import UrlFetchConfig

log = getLogger(__name__)

_NOISE_TAGS = ("script", "style", "noscript", "template")
_WHITESPACE_RE = re.compile(r"\s+")


class HttpUrlContentFetcher:
    """:class:`~stashpy.domain.ports.UrlContentFetcher` over a resilient HTTP client."""

    def __init__(
        self,
        *,
        config: UrlFetchConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config or get_url_fetch_config()
        self._client_factory = client_factory or ResilientClient

    def __call__(self, url: str) -> FetchedContent:
        return asyncio.run(self._fetch_async(url))

    async def _fetch_async(self, url: str) -> FetchedContent:
        log.info("Fetching content from %s", url)
        try:
            async with self._client_factory(self._config.resilience) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            log.warning("Fetching %s failed with status %s", url, status_code)
            raise UpstreamFetchError(
                url, f"HTTP {status_code}", status_code=status_code
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.warning("Fetching %s failed: %s", url, exc)
            raise UpstreamFetchError(url, str(exc) or type(exc).__name__) from exc

        return parse_html(url, response.text)


def parse_html(url: str, html: str) -> FetchedContent:
    soup = BeautifulSoup(html, "lxml")
    return FetchedContent(url=url, title=extract_title(soup), content=extract_content(soup))


def extract_title(soup: BeautifulSoup) -> str | None:
    """Return the ``<title>`` text, falling back to the Open Graph title."""

    title = soup.title
    if isinstance(title, Tag):
        text = _clean_text(title.get_text(" ", strip=True))
        if text:
            return text

    og_title = soup.find("meta", attrs={"property": "og:title"})
    if isinstance(og_title, Tag):
        content = og_title.get("content")
        if isinstance(content, str) and content.strip():
            return content.strip()
    return None


def extract_content(soup: BeautifulSoup) -> str | None:
    """Return the visible text of ``<main>``, else ``<article>``, else the whole page."""

    for noise in list(soup.find_all(_NOISE_TAGS)):
        noise.decompose()

    container = _pick_main_container(soup)
    text = _clean_text(container.get_text(" ", strip=True))
    return text or None


def _pick_main_container(soup: BeautifulSoup) -> Tag | BeautifulSoup:
    for name in ("main", "article"):
        tag = soup.find(name)
        if isinstance(tag, Tag):
            return tag
    body = soup.body
    if isinstance(body, Tag):
        return body
    return soup


def _clean_text(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()
