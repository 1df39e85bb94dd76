"""Where stashpy keeps its bookmark database and HTTP cache.

Both live as SQLite files under one data directory: ``STASHPY_DATA_DIR`` when
set, otherwise ``stashpy`` below the platform's per-user data home.
``DATABASE_URI`` bypasses the directory for the bookmark store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .env import optional_env_var

BOOKMARK_DB_FILE = "stashpy.db"
HTTP_CACHE_FILE = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Files under the data directory, which is created on first use."""

    data_dir: Path
    bookmark_db_file: str = BOOKMARK_DB_FILE
    http_cache_file: str = HTTP_CACHE_FILE

    def path_for(self, filename: str) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir / filename

    def bookmark_db_path(self) -> Path:
        return self.path_for(self.bookmark_db_file)

    def http_cache_path(self) -> Path:
        return self.path_for(self.http_cache_file)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str

    @classmethod
    def for_sqlite_file(cls, path: Path) -> DatabaseConfig:
        return cls(uri=f"sqlite+pysqlite:///{path}")


def _user_data_home() -> Path:
    if os.name == "nt":
        return Path(optional_env_var("LOCALAPPDATA") or Path.home() / "AppData" / "Local")
    return Path(optional_env_var("XDG_DATA_HOME") or Path.home() / ".local" / "share")


def get_storage_config() -> StorageConfig:
    configured = optional_env_var("STASHPY_DATA_DIR")
    data_dir = Path(configured) if configured else _user_data_home() / "stashpy"
    return StorageConfig(data_dir=data_dir.expanduser().resolve())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    uri = optional_env_var("DATABASE_URI")
    if uri is not None:
        return DatabaseConfig(uri=uri)
    return DatabaseConfig.for_sqlite_file((storage or get_storage_config()).bookmark_db_path())
