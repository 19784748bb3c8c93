"""Application service reconciling one inbound message per call."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from eddn_worker.domain import notes
from eddn_worker.domain.errors import EnvelopeValidationError
from eddn_worker.domain.identity import resolve_factions, resolve_system
from eddn_worker.domain.model import RECONCILED_EVENTS
from eddn_worker.domain.reconciliation import reconcile_factions, reconcile_system
from eddn_worker.domain.time_windows import Deadline, trailing_window_start, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from eddn_worker.domain.gate import MessageGate
    from eddn_worker.domain.model import Envelope, SystemSnapshot
    from eddn_worker.domain.ports import AuditSink, EnvelopeDecoder, ReconciliationUnitOfWork
    from eddn_worker.domain.time_windows import Clock

log = getLogger(__name__)

DEFAULT_HISTORY_WINDOW = timedelta(hours=48)
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(slots=True)
class ProcessingOutcome:
    """What became of one message."""

    applied: bool
    notes: list[str] = field(default_factory=list[str])


@dataclass(slots=True)
class TransactionCoordinator:
    """Runs gate, validation and reconciliation for each message.

    Reconciliation happens in one unit of work per attempt. Attempts failing
    with one of ``retry_on`` are rolled back and repeated, up to
    ``max_attempts`` in total. The raw message and its outcome are always
    handed to the audit sink afterwards, whatever happened before.
    """

    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork]
    audit_sink: AuditSink
    decoder: EnvelopeDecoder
    gate: MessageGate
    history_window: timedelta = DEFAULT_HISTORY_WINDOW
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    use_gateway_clock: bool = False
    retry_on: tuple[type[Exception], ...] = ()
    clock: Clock = utcnow

    def handle(self, raw: Mapping[str, object]) -> ProcessingOutcome:
        outcome = self._process(raw)
        self._audit(raw, outcome)
        return outcome

    def _process(self, raw: Mapping[str, object]) -> ProcessingOutcome:
        try:
            envelope = self.decoder.decode(raw)
        except EnvelopeValidationError as exc:
            log.warning("Rejected malformed envelope: %s", exc)
            return ProcessingOutcome(applied=False, notes=list(exc.reasons))

        reasons = self.gate.check(envelope)
        if reasons:
            log.warning("Rejected message: %s", "; ".join(reasons))
            return ProcessingOutcome(applied=False, notes=reasons)

        if envelope.event not in RECONCILED_EVENTS:
            log.debug("Skipping %s event", envelope.event)
            return ProcessingOutcome(applied=False, notes=[notes.EVENT_SKIPPED])

        try:
            snapshot = self.decoder.to_snapshot(envelope, now=self.clock())
        except EnvelopeValidationError as exc:
            log.info("Invalid %s message: %s", envelope.event, exc)
            return ProcessingOutcome(applied=False, notes=list(exc.reasons))

        return self._reconcile_with_retry(snapshot, now=self._reconciliation_now(envelope))

    def _reconciliation_now(self, envelope: Envelope) -> datetime:
        if self.use_gateway_clock:
            if envelope.gateway_timestamp is not None:
                return envelope.gateway_timestamp
            log.debug("Envelope has no gateway timestamp; using the wall clock")
        return self.clock()

    def _reconcile_with_retry(
        self, snapshot: SystemSnapshot, *, now: datetime
    ) -> ProcessingOutcome:
        attempt = 1
        while True:
            try:
                return self._reconcile(snapshot, now=now)
            except self.retry_on as exc:
                if attempt >= self.max_attempts:
                    log.exception("Giving up on %s after %d attempts", snapshot.name, attempt)
                    return ProcessingOutcome(applied=False, notes=[notes.db_error(exc)])
                log.warning(
                    "Attempt %d for %s failed (%s); retrying",
                    attempt,
                    snapshot.name,
                    type(exc).__name__,
                )
                attempt += 1
            except Exception as exc:  # noqa: BLE001
                log.exception("Reconciliation of %s failed", snapshot.name)
                return ProcessingOutcome(applied=False, notes=[notes.db_error(exc)])

    def _reconcile(self, snapshot: SystemSnapshot, *, now: datetime) -> ProcessingOutcome:
        deadline = Deadline(self.timeout_seconds)
        window_start = trailing_window_start(now, self.history_window)
        created_at = self.clock()

        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            system, system_notes = resolve_system(snapshot, repositories.systems, now=created_at)
            factions, faction_notes = resolve_factions(
                snapshot.factions, repositories.factions, now=created_at
            )
            system_result = reconcile_system(
                system,
                snapshot,
                factions,
                repositories.system_histories,
                window_start=window_start,
                deadline=deadline,
            )
            faction_result = reconcile_factions(
                system,
                snapshot,
                factions,
                repositories.system_faction_histories,
                repositories.factions,
                window_start=window_start,
                deadline=deadline,
            )
            deadline.check("commit")
            uow.commit()

        applied = system_result.applied or faction_result.applied
        log.info(
            "%s %s at %s",
            "Applied" if applied else "No change for",
            snapshot.name,
            snapshot.timestamp.isoformat(),
        )
        return ProcessingOutcome(
            applied=applied,
            notes=[*system_notes, *faction_notes, *system_result.notes, *faction_result.notes],
        )

    def _audit(self, raw: Mapping[str, object], outcome: ProcessingOutcome) -> None:
        header = raw.get("header")
        message = raw.get("message")
        try:
            self.audit_sink.append(
                schema_ref=str(raw.get("$schemaRef", "")),
                header=header if isinstance(header, Mapping) else {},
                message=message if isinstance(message, Mapping) else {},
                applied=outcome.applied,
                notes=outcome.notes,
            )
        except Exception:  # noqa: BLE001
            log.exception("Failed to archive message")
