"""Application configuration helpers."""

from __future__ import annotations

from .archive import ArchiveConfig, get_archive_config
from .env import env_flag, env_float, env_int
from .errors import ConfigurationError
from .guards import ANY_VERSION, SoftwareGuard, SoftwareGuards, load_software_guards
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .worker import JOURNAL_SCHEMA, JOURNAL_SCHEMA_TEST, WorkerConfig, get_worker_config

__all__ = [
    "ANY_VERSION",
    "JOURNAL_SCHEMA",
    "JOURNAL_SCHEMA_TEST",
    "ArchiveConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "SoftwareGuard",
    "SoftwareGuards",
    "StorageConfig",
    "WorkerConfig",
    "configure_logging",
    "env_flag",
    "env_float",
    "env_int",
    "get_archive_config",
    "get_database_config",
    "get_database_uri",
    "get_storage_config",
    "get_worker_config",
    "load_software_guards",
]
