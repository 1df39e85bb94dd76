"""Ingestion defaults."""

from __future__ import annotations

from dataclasses import dataclass

from stashpy.domain.reconciliation.persist import DEFAULT_MAX_ATTEMPTS

from .env import env_bool, env_int
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class IngestConfig:
    """Bounds for the classify-and-persist retry loop and ingest defaults."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    auto_tag: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")


def get_ingest_config() -> IngestConfig:
    return IngestConfig(
        max_attempts=env_int("STASHPY_INGEST_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
        auto_tag=env_bool("STASHPY_AUTO_TAG", default=False),
    )
