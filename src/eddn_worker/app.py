"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, OperationalError

from eddn_worker.adapters.eddn import JournalDecoder, SoftwareAllowList
from eddn_worker.adapters.sqlalchemy import (
    SqlAlchemyAuditSink,
    SqlAlchemyReconciliationUnitOfWork,
    startup,
)
from eddn_worker.adapters.sqlalchemy.unit_of_work import is_started
from eddn_worker.config import get_worker_config, load_software_guards
from eddn_worker.domain.coordinator import TransactionCoordinator
from eddn_worker.domain.gate import MessageGate
from eddn_worker.domain.ports.unit_of_work import ReconciliationUnitOfWork

if TYPE_CHECKING:
    from eddn_worker.config import WorkerConfig
    from eddn_worker.domain.ports import AuditSink
    from eddn_worker.domain.time_windows import Clock

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]

# Serialisation conflicts, lock timeouts and lost unique-key races.
TRANSIENT_DATABASE_ERRORS: tuple[type[Exception], ...] = (OperationalError, IntegrityError)

log = getLogger(__name__)


def build_message_gate(config: WorkerConfig) -> MessageGate:
    guards = load_software_guards(config.software_guards_path)
    return MessageGate(
        journal_schema=config.journal_schema,
        minimum_game_version=config.minimum_game_version,
        allow_list=SoftwareAllowList(guards),
    )


def build_coordinator(
    *,
    config: WorkerConfig | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    audit_sink: AuditSink | None = None,
    clock: Clock | None = None,
    load_archive: bool | None = None,
) -> TransactionCoordinator:
    """Wire the coordinator to the configured adapters.

    The SQLAlchemy adapter is started on first use unless both a unit-of-work
    factory and an audit sink are supplied.
    """

    effective_config = config or get_worker_config()
    if load_archive is not None:
        effective_config = replace(effective_config, load_archive=load_archive)

    if (unit_of_work_factory is None or audit_sink is None) and not is_started():
        startup()

    effective_uow = unit_of_work_factory or partial(
        SqlAlchemyReconciliationUnitOfWork, statement_timeout=effective_config.timeout_seconds
    )
    log.info(
        "Building coordinator: schema=%s, window=%s, attempts=%s, timeout=%ss, archive=%s",
        effective_config.journal_schema,
        effective_config.history_window,
        effective_config.max_attempts,
        effective_config.timeout_seconds,
        effective_config.load_archive,
    )

    coordinator = TransactionCoordinator(
        unit_of_work_factory=effective_uow,
        audit_sink=audit_sink or SqlAlchemyAuditSink(),
        decoder=JournalDecoder(),
        gate=build_message_gate(effective_config),
        history_window=effective_config.history_window,
        max_attempts=effective_config.max_attempts,
        timeout_seconds=effective_config.timeout_seconds,
        use_gateway_clock=effective_config.load_archive,
        retry_on=TRANSIENT_DATABASE_ERRORS,
    )
    if clock is not None:
        coordinator.clock = clock
    return coordinator
