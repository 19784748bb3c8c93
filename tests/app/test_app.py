from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, OperationalError

from eddn_worker.app import build_coordinator, build_message_gate
from eddn_worker.config import JOURNAL_SCHEMA_TEST, WorkerConfig
from eddn_worker.domain.model import Envelope
from tests.helpers.galaxy import InMemoryUnitOfWork, RecordingAuditSink, in_memory_repositories

if TYPE_CHECKING:
    from pathlib import Path


def test_build_message_gate_uses_configured_schema() -> None:
    gate = build_message_gate(WorkerConfig(test_schema=True))
    envelope = Envelope(
        schema_ref=JOURNAL_SCHEMA_TEST,
        software_name="EDDiscovery",
        software_version="16.2.0",
        game_version="4.0.0.1904",
    )

    assert gate.journal_schema == JOURNAL_SCHEMA_TEST
    assert gate.check(envelope) == []


def test_build_message_gate_reads_guard_file(tmp_path: Path) -> None:
    path = tmp_path / "guards.json"
    path.write_text(
        '{"allowed": [{"softwareName": "^Only Me$", "softwareVersion": ">=1.0.0"}]}',
        encoding="utf-8",
    )

    gate = build_message_gate(WorkerConfig(software_guards_path=path))

    assert gate.allow_list.is_permitted("Only Me", "1.0.0")
    assert not gate.allow_list.is_permitted("EDDiscovery", "16.2.0")


def test_build_coordinator_applies_overrides() -> None:
    repositories = in_memory_repositories()
    audit = RecordingAuditSink()

    coordinator = build_coordinator(
        config=WorkerConfig(max_attempts=7),
        unit_of_work_factory=lambda: InMemoryUnitOfWork(repositories),
        audit_sink=audit,
        load_archive=True,
    )

    assert coordinator.max_attempts == 7
    assert coordinator.use_gateway_clock is True
    assert coordinator.audit_sink is audit
    assert OperationalError in coordinator.retry_on
    assert IntegrityError in coordinator.retry_on
