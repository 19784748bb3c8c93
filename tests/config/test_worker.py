from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

import pytest

from eddn_worker.config import (
    JOURNAL_SCHEMA,
    JOURNAL_SCHEMA_TEST,
    ConfigurationError,
    get_archive_config,
    get_worker_config,
    load_software_guards,
)
from eddn_worker.config.archive import DEFAULT_DOWNLOAD_URL

_WORKER_VARS = (
    "TEST_SCHEMA",
    "LOAD_ARCHIVE",
    "HISTORY_WINDOW_HOURS",
    "RECONCILE_MAX_ATTEMPTS",
    "RECONCILE_TIMEOUT_SECONDS",
    "SOFTWARE_GUARDS_PATH",
    "ARCHIVE_FOLDER",
    "DOWNLOAD_URL",
    "DOWNLOAD_START_DATE",
    "DOWNLOAD_END_DATE",
    "WORKER_THREADS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _WORKER_VARS:
        monkeypatch.delenv(name, raising=False)


def test_worker_config_defaults() -> None:
    config = get_worker_config()

    assert config.journal_schema == JOURNAL_SCHEMA
    assert config.load_archive is False
    assert config.history_window == timedelta(hours=48)
    assert config.max_attempts == 3
    assert config.timeout_seconds == 30.0
    assert config.software_guards_path is None


def test_worker_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_SCHEMA", "true")
    monkeypatch.setenv("LOAD_ARCHIVE", "True")
    monkeypatch.setenv("HISTORY_WINDOW_HOURS", "12")
    monkeypatch.setenv("RECONCILE_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("SOFTWARE_GUARDS_PATH", "/etc/eddn/guards.json")

    config = get_worker_config()

    assert config.journal_schema == JOURNAL_SCHEMA_TEST
    assert config.load_archive is True
    assert config.history_window == timedelta(hours=12)
    assert config.max_attempts == 5
    assert config.software_guards_path == Path("/etc/eddn/guards.json")


def test_worker_config_rejects_zero_attempts(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECONCILE_MAX_ATTEMPTS", "0")

    with pytest.raises(ConfigurationError):
        get_worker_config()


def test_archive_config_reads_dates(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ARCHIVE_FOLDER", str(tmp_path))
    monkeypatch.setenv("DOWNLOAD_START_DATE", "2024-01-01")
    monkeypatch.setenv("DOWNLOAD_END_DATE", "2024-01-03")
    monkeypatch.setenv("WORKER_THREADS", "8")

    config = get_archive_config()

    assert config.folder == tmp_path
    assert config.download_url == DEFAULT_DOWNLOAD_URL
    assert config.start_date == date(2024, 1, 1)
    assert config.end_date == date(2024, 1, 3)
    assert config.worker_threads == 8


def test_archive_config_rejects_bad_date(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOWNLOAD_START_DATE", "01/01/2024")

    with pytest.raises(ConfigurationError, match="DOWNLOAD_START_DATE"):
        get_archive_config()


def test_bundled_software_guards_load() -> None:
    guards = load_software_guards()

    assert any(guard.software_name == "^E:D Market Connector" for guard in guards.allowed)
    assert any(guard.all_versions for guard in guards.disallowed)


def test_software_guards_from_path(tmp_path: Path) -> None:
    path = tmp_path / "guards.json"
    path.write_text(
        '{"allowed": [{"softwareName": "^Tool$", "softwareVersion": ">=1.0.0"}]}',
        encoding="utf-8",
    )

    guards = load_software_guards(path)

    assert len(guards.allowed) == 1
    assert guards.allowed[0].software_version == ">=1.0.0"
    assert guards.disallowed == ()


def test_software_guards_invalid_document(tmp_path: Path) -> None:
    path = tmp_path / "guards.json"
    path.write_text('{"allowed": [{"softwareVersion": "1"}]}', encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid software guards"):
        load_software_guards(path)


def test_software_guards_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Unable to read"):
        load_software_guards(tmp_path / "missing.json")
