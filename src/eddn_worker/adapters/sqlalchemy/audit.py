"""Audit sink writing processing records in a session of their own."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from eddn_worker.adapters.sqlalchemy.unit_of_work import session_factory
from eddn_worker.domain.model import ProcessingRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from sqlalchemy.orm import Session

log = getLogger(__name__)


class SqlAlchemyAuditSink:
    """Appends one ``ProcessingRecord`` per message, committed immediately."""

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    def append(
        self,
        *,
        schema_ref: str,
        header: Mapping[str, object],
        message: Mapping[str, object],
        applied: bool,
        notes: Sequence[str],
    ) -> None:
        record = ProcessingRecord(
            schema_ref=schema_ref,
            header=dict(header),
            message=dict(message),
            applied=applied,
            notes=list(notes),
        )
        factory = self._session_factory or session_factory()
        with factory() as session, session.begin():
            session.add(record)
        log.debug("Archived message %s (applied=%s)", record.id, applied)


if TYPE_CHECKING:
    from eddn_worker.domain.ports import AuditSink

    _sink_check: AuditSink = SqlAlchemyAuditSink()
