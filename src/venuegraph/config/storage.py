"""Where the venue store and the HTTP cache live on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR_ENV = "VENUEGRAPH_DATA_DIR"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = "venuegraph.db"
    http_cache_filename: str = "http_cache.db"

    def _ensured_dir(self) -> Path:
        path = self.data_dir.expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def database_path(self) -> Path:
        return self._ensured_dir() / self.database_filename

    def http_cache_path(self) -> Path:
        return self._ensured_dir() / self.http_cache_filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    configured = os.getenv(DATA_DIR_ENV)
    if configured:
        return StorageConfig(data_dir=Path(configured))
    xdg_data = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_data) if xdg_data else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=base / "venuegraph")


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Resolve the relational store URI; ``DATABASE_URI`` wins over the local SQLite file."""

    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    database_path = (storage or get_storage_config()).database_path()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{database_path}")


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path()
