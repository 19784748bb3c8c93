"""Settings for replaying EDDN journal archives."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Final

from .env import env_int
from .errors import ConfigurationError

DEFAULT_DOWNLOAD_URL: Final[str] = "https://edgalaxydata.space/EDDN/"
DEFAULT_WORKER_THREADS: Final[int] = 4


@dataclass(frozen=True, slots=True)
class ArchiveConfig:
    folder: Path | None = None
    download_url: str = DEFAULT_DOWNLOAD_URL
    start_date: date | None = None
    end_date: date | None = None
    worker_threads: int = DEFAULT_WORKER_THREADS


def _env_date(name: str) -> date | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}") from exc


def get_archive_config() -> ArchiveConfig:
    folder = os.getenv("ARCHIVE_FOLDER")
    return ArchiveConfig(
        folder=Path(folder).expanduser() if folder else None,
        download_url=os.getenv("DOWNLOAD_URL") or DEFAULT_DOWNLOAD_URL,
        start_date=_env_date("DOWNLOAD_START_DATE"),
        end_date=_env_date("DOWNLOAD_END_DATE"),
        worker_threads=env_int("WORKER_THREADS", default=DEFAULT_WORKER_THREADS, minimum=1),
    )
