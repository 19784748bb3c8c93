from __future__ import annotations

import bz2
import io
import json
from datetime import date
from typing import TYPE_CHECKING, Any

import pytest

from eddn_worker.config import ArchiveConfig
from eddn_worker.domain.coordinator import ProcessingOutcome
from eddn_worker.ui import cli
from tests.helpers.envelopes import jump_message, make_envelope

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path


class FakeCoordinator:
    def __init__(self) -> None:
        self.handled: list[Mapping[str, object]] = []

    def handle(self, raw: Mapping[str, object]) -> ProcessingOutcome:
        self.handled.append(raw)
        message = raw.get("message")
        return ProcessingOutcome(
            applied=isinstance(message, dict) and message.get("StarSystem") == "Sol"
        )


@pytest.fixture
def fake() -> FakeCoordinator:
    return FakeCoordinator()


@pytest.fixture
def factory_calls() -> list[dict[str, Any]]:
    return []


def _factory(fake: FakeCoordinator, calls: list[dict[str, Any]]) -> Any:
    def factory(**kwargs: Any) -> FakeCoordinator:
        calls.append(kwargs)
        return fake

    return factory


@pytest.fixture(autouse=True)
def archive_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ARCHIVE_FOLDER",
        "DOWNLOAD_URL",
        "DOWNLOAD_START_DATE",
        "DOWNLOAD_END_DATE",
        "WORKER_THREADS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_handle_reads_json_lines_file(
    tmp_path: Path, fake: FakeCoordinator, factory_calls: list[dict[str, Any]]
) -> None:
    path = tmp_path / "messages.jsonl"
    lines = [
        json.dumps(make_envelope()),
        "",
        "not json",
        json.dumps(make_envelope(jump_message(system="Achenar", address=2))),
        "[1, 2]",
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    out = io.StringIO()

    cli.main(["handle", str(path)], coordinator_factory=_factory(fake, factory_calls), out=out)

    assert len(fake.handled) == 2
    assert factory_calls == [{}]
    assert out.getvalue() == "processed=2 applied=1 skipped=1\n"


def test_handle_reads_stdin(
    monkeypatch: pytest.MonkeyPatch, fake: FakeCoordinator, factory_calls: list[dict[str, Any]]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(make_envelope()) + "\n"))
    out = io.StringIO()

    cli.main(["handle", "-"], coordinator_factory=_factory(fake, factory_calls), out=out)

    assert out.getvalue() == "processed=1 applied=1 skipped=0\n"


def test_handle_missing_file_exits_with_failure(
    tmp_path: Path, fake: FakeCoordinator, factory_calls: list[dict[str, Any]]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            ["handle", str(tmp_path / "missing.jsonl")],
            coordinator_factory=_factory(fake, factory_calls),
            out=io.StringIO(),
        )

    assert excinfo.value.code == 1


def test_load_archive_from_folder_forces_replay_mode(
    tmp_path: Path, fake: FakeCoordinator, factory_calls: list[dict[str, Any]]
) -> None:
    records = [make_envelope(), make_envelope(jump_message(system="Achenar", address=2))]
    payload = "".join(json.dumps(record) + "\n" for record in records).encode("utf-8")
    (tmp_path / "Journal.FSDJump-2024-01-01.jsonl.bz2").write_bytes(bz2.compress(payload))
    out = io.StringIO()

    cli.main(
        ["load-archive", "--folder", str(tmp_path), "--workers", "2"],
        coordinator_factory=_factory(fake, factory_calls),
        out=out,
    )

    assert factory_calls == [{"load_archive": True}]
    assert len(fake.handled) == 2
    assert out.getvalue().startswith("delivered=2 applied=1 skipped=1 failed=0")


def test_load_archive_without_source_exits_with_usage_error(
    fake: FakeCoordinator, factory_calls: list[dict[str, Any]]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            ["load-archive", "--start", "2024-01-01"],
            coordinator_factory=_factory(fake, factory_calls),
        )

    assert excinfo.value.code == 2
    assert factory_calls == []


def test_load_archive_rejects_bad_dates(
    fake: FakeCoordinator, factory_calls: list[dict[str, Any]]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            ["load-archive", "--start", "2024-13-01", "--end", "2024-01-02"],
            coordinator_factory=_factory(fake, factory_calls),
        )

    assert excinfo.value.code == 2


def test_load_archive_rejects_inverted_range(
    fake: FakeCoordinator, factory_calls: list[dict[str, Any]]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            ["load-archive", "--start", "2024-01-02", "--end", "2024-01-01"],
            coordinator_factory=_factory(fake, factory_calls),
        )

    assert excinfo.value.code == 2


def test_archive_settings_fall_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOWNLOAD_START_DATE", "2024-01-01")
    monkeypatch.setenv("DOWNLOAD_END_DATE", "2024-01-02")
    monkeypatch.setenv("WORKER_THREADS", "3")
    args = cli._parse_args(["load-archive", "--url", "https://mirror.example/EDDN/"])

    settings = cli._archive_settings(args, cli.get_archive_config())

    assert settings == ArchiveConfig(
        folder=None,
        download_url="https://mirror.example/EDDN/",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 2),
        worker_threads=3,
    )


def test_load_archive_downloads_when_no_folder(
    monkeypatch: pytest.MonkeyPatch, fake: FakeCoordinator, factory_calls: list[dict[str, Any]]
) -> None:
    requested: list[tuple[str, date, date]] = []

    def fake_download(base_url: str, start: date, end: date) -> Any:
        requested.append((base_url, start, end))
        return iter([make_envelope()])

    monkeypatch.setattr(cli, "download_archives", fake_download)
    out = io.StringIO()

    cli.main(
        ["load-archive", "--start", "2024-01-01", "--end", "2024-01-03"],
        coordinator_factory=_factory(fake, factory_calls),
        out=out,
    )

    assert requested == [("https://edgalaxydata.space/EDDN/", date(2024, 1, 1), date(2024, 1, 3))]
    assert len(fake.handled) == 1
