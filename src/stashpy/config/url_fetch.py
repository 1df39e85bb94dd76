"""URL content fetching configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int, optional_env_var
from .errors import ConfigurationError
from .http_resilience import DAY_SECONDS, CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


@dataclass(frozen=True, slots=True)
class UrlFetchConfig:
    resilience: ResilienceConfig


def get_url_fetch_config(*, resilience: ResilienceConfig | None = None) -> UrlFetchConfig:
    """Build the page fetch settings from the environment.

    ``STASHPY_HTTP_CACHE`` (default on) keeps fetched pages in the data
    directory for ``STASHPY_HTTP_CACHE_TTL`` seconds (default one day).
    """

    if resilience is not None:
        return UrlFetchConfig(resilience=resilience)

    user_agent = optional_env_var("STASHPY_USER_AGENT") or DEFAULT_USER_AGENT
    cache: CacheConfig | None = None
    if env_bool("STASHPY_HTTP_CACHE", default=True):
        ttl = env_int("STASHPY_HTTP_CACHE_TTL", DAY_SECONDS)
        if ttl <= 0:
            raise ConfigurationError("STASHPY_HTTP_CACHE_TTL must be a positive number of seconds")
        cache = CacheConfig(ttl_seconds=ttl)
    return UrlFetchConfig(
        resilience=ResilienceConfig(
            name="url-fetch",
            retry=RetryPolicy(),
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            cache=cache,
            default_headers={"User-Agent": user_agent},
        )
    )
