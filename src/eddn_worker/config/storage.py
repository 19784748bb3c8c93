"""Database location.

Production deployments point ``DATABASE_URI`` at PostgreSQL. Without it the
worker keeps a SQLite file in the per-user data directory, which is enough
for archive replays and local runs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from .errors import ConfigurationError

APP_DIR_NAME: Final[str] = "eddn_worker"
DEFAULT_DB_FILENAME: Final[str] = "eddn_worker.db"

# Backends whose partial unique indexes guard the open history rows.
SUPPORTED_BACKENDS: Final[frozenset[str]] = frozenset({"postgresql", "sqlite"})


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def database_path(self) -> Path:
        data_dir = self.data_dir.expanduser().resolve()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    backend: str


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        return Path(base or Path.home() / "AppData" / "Local") / APP_DIR_NAME
    base = os.getenv("XDG_DATA_HOME")
    return Path(base or Path.home() / ".local" / "share") / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("EDDN_WORKER_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def _database_config(uri: str) -> DatabaseConfig:
    try:
        backend = make_url(uri).get_backend_name()
    except ArgumentError as exc:
        raise ConfigurationError(f"DATABASE_URI is not a database URL: {uri!r}") from exc
    if backend not in SUPPORTED_BACKENDS:
        supported = ", ".join(sorted(SUPPORTED_BACKENDS))
        raise ConfigurationError(f"DATABASE_URI must use one of {supported}, got {backend!r}")
    return DatabaseConfig(uri=uri, backend=backend)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI", "").strip()
    if env_uri:
        return _database_config(env_uri)
    return _database_config((storage or get_storage_config()).database_uri())


def get_database_uri() -> str:
    return get_database_config().uri
