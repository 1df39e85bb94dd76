from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
from bs4 import BeautifulSoup

from stashpy.adapters.http_resilience import ResilientClient
from stashpy.adapters.url_fetcher import (
    HttpUrlContentFetcher,
    extract_content,
    extract_title,
    parse_html,
)
from stashpy.config import ResilienceConfig, RetryPolicy, UrlFetchConfig
from stashpy.domain.errors import UpstreamFetchError
from stashpy.domain.ports import FetchedContent, UrlContentFetcher

if TYPE_CHECKING:
    from collections.abc import Callable

NO_RETRY = RetryPolicy(total=0)

PAGE = """
<html>
  <head>
    <title>  Deep   Learning Notes </title>
    <style>body { color: red; }</style>
  </head>
  <body>
    <nav>Home | About</nav>
    <main>
      <h1>Neural networks</h1>
      <p>Backpropagation explained.</p>
      <script>trackVisitor();</script>
    </main>
    <footer>Copyright</footer>
  </body>
</html>
"""


def _fetcher(
    handler: Callable[[httpx.Request], httpx.Response],
    retry: RetryPolicy = NO_RETRY,
) -> HttpUrlContentFetcher:
    config = UrlFetchConfig(
        resilience=ResilienceConfig(name="url-fetch-test", retry=retry, cache=None)
    )
    transport = httpx.MockTransport(handler)
    return HttpUrlContentFetcher(
        config=config,
        client_factory=lambda resilience: ResilientClient(resilience, transport=transport),
    )


def test_parse_html_extracts_title_and_main_text() -> None:
    fetched = parse_html("https://example.com", PAGE)

    assert fetched == FetchedContent(
        url="https://example.com",
        title="Deep Learning Notes",
        content="Neural networks Backpropagation explained.",
    )


def test_extract_title_falls_back_to_open_graph() -> None:
    soup = BeautifulSoup(
        '<html><head><meta property="og:title" content=" Shared Post "></head></html>', "lxml"
    )

    assert extract_title(soup) == "Shared Post"


def test_extract_title_missing() -> None:
    assert extract_title(BeautifulSoup("<p>no title</p>", "lxml")) is None


@pytest.mark.parametrize(
    ("html", "expected"),
    [
        ("<body><article>Story</article><aside>Ads</aside></body>", "Story"),
        ("<body><main>Main</main><article>Story</article></body>", "Main"),
        ("<body><p>Just a body</p><noscript>Enable JS</noscript></body>", "Just a body"),
        ("<body><script>only()</script></body>", None),
    ],
)
def test_extract_content_picks_main_container(html: str, expected: str | None) -> None:
    assert extract_content(BeautifulSoup(html, "lxml")) == expected


def test_fetcher_satisfies_port() -> None:
    assert isinstance(_fetcher(lambda _request: httpx.Response(200)), UrlContentFetcher)


def test_fetcher_returns_parsed_page() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=PAGE, headers={"Content-Type": "text/html"})

    fetched = _fetcher(handler)("https://example.com/notes")

    assert seen == ["https://example.com/notes"]
    assert fetched.title == "Deep Learning Notes"
    assert fetched.content == "Neural networks Backpropagation explained."


def test_fetcher_raises_on_http_error_status() -> None:
    fetcher = _fetcher(lambda _request: httpx.Response(404, text="missing"))

    with pytest.raises(UpstreamFetchError) as excinfo:
        fetcher("https://example.com/missing")

    assert excinfo.value.status_code == 404
    assert excinfo.value.url == "https://example.com/missing"


def test_fetcher_raises_on_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamFetchError) as excinfo:
        _fetcher(handler)("https://unreachable.example")

    assert excinfo.value.status_code is None
    assert "connection refused" in excinfo.value.reason


def test_fetcher_retries_transient_status() -> None:
    statuses = [503, 200]

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(statuses.pop(0), text=PAGE, headers={"Content-Type": "text/html"})

    fetched = _fetcher(handler, retry=RetryPolicy(total=1, backoff_factor=0.0))(
        "https://example.com/flaky"
    )

    assert statuses == []
    assert fetched.title == "Deep Learning Notes"


def test_fetcher_does_not_retry_client_errors() -> None:
    calls: list[int] = []

    def handler(_request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(404)

    with pytest.raises(UpstreamFetchError):
        _fetcher(handler, retry=RetryPolicy(total=3, backoff_factor=0.0))("https://example.com/x")

    assert len(calls) == 1
