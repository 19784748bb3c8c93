"""Reconciliation worker settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Final

from .env import env_flag, env_float, env_int

JOURNAL_SCHEMA: Final[str] = "https://eddn.edcd.io/schemas/journal/1"
JOURNAL_SCHEMA_TEST: Final[str] = "https://eddn.edcd.io/schemas/journal/1/test"

DEFAULT_HISTORY_WINDOW_HOURS: Final[float] = 48.0
DEFAULT_MAX_ATTEMPTS: Final[int] = 3
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
MINIMUM_GAME_VERSION: Final[float] = 4.0


@dataclass(frozen=True, slots=True)
class WorkerConfig:
    """Switches that change how a message is reconciled.

    ``test_schema`` selects the journal test schema instead of the production one.
    ``load_archive`` makes reconciliation use the envelope's gateway timestamp as
    "now", so bulk replays of old archives see the same trailing window that live
    processing saw at the time.
    """

    test_schema: bool = False
    load_archive: bool = False
    history_window: timedelta = timedelta(hours=DEFAULT_HISTORY_WINDOW_HOURS)
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    minimum_game_version: float = MINIMUM_GAME_VERSION
    software_guards_path: Path | None = None

    @property
    def journal_schema(self) -> str:
        return JOURNAL_SCHEMA_TEST if self.test_schema else JOURNAL_SCHEMA


def get_worker_config() -> WorkerConfig:
    guards_path = os.getenv("SOFTWARE_GUARDS_PATH")
    return WorkerConfig(
        test_schema=env_flag("TEST_SCHEMA"),
        load_archive=env_flag("LOAD_ARCHIVE"),
        history_window=timedelta(
            hours=env_float("HISTORY_WINDOW_HOURS", default=DEFAULT_HISTORY_WINDOW_HOURS)
        ),
        max_attempts=env_int("RECONCILE_MAX_ATTEMPTS", default=DEFAULT_MAX_ATTEMPTS, minimum=1),
        timeout_seconds=env_float("RECONCILE_TIMEOUT_SECONDS", default=DEFAULT_TIMEOUT_SECONDS),
        software_guards_path=Path(guards_path).expanduser() if guards_path else None,
    )
