"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_int, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .ingest import IngestConfig, get_ingest_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .tagging import TaggingConfig, get_tagging_config, load_tag_catalog
from .url_fetch import UrlFetchConfig, get_url_fetch_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "IngestConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "TaggingConfig",
    "UrlFetchConfig",
    "configure_logging",
    "env_bool",
    "env_int",
    "get_database_config",
    "get_ingest_config",
    "get_storage_config",
    "get_tagging_config",
    "get_url_fetch_config",
    "load_tag_catalog",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
