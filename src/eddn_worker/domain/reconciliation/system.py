"""Validity timeline of a system's aggregate attributes."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from eddn_worker.domain import notes
from eddn_worker.domain.errors import IntegrityViolation
from eddn_worker.domain.model import SystemHistory

from .result import ReconcileResult

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from eddn_worker.domain.model import Faction, System, SystemSnapshot
    from eddn_worker.domain.ports import SystemHistoryRepository
    from eddn_worker.domain.time_windows import Deadline

log = getLogger(__name__)


def reconcile_system(
    system: System,
    snapshot: SystemSnapshot,
    resolved_factions: Mapping[str, Faction],
    histories: SystemHistoryRepository,
    *,
    window_start: datetime,
    deadline: Deadline,
) -> ReconcileResult:
    """Open a new system-history interval if ``snapshot`` carries new information.

    Snapshots older than the open interval, equal to it, or equal to any
    interval that started inside the trailing window are discarded.
    """

    controlling = resolved_factions.get(snapshot.controlling_faction.name_lower)
    if controlling is None:
        raise IntegrityViolation(
            notes.system_faction_not_found(snapshot.controlling_faction.name)
        )

    deadline.check("system history lookup")
    current = histories.get_open(system.id)
    recent = histories.valid_since(system.id, window_start)

    result = ReconcileResult()
    if current is not None and current.is_newer_than(snapshot.timestamp):
        result.skip(notes.SYSTEM_HISTORY_OLDER)
        return result

    incoming = snapshot.aggregate(controlling.id)
    if current is not None and current.aggregate() == incoming:
        result.skip(notes.SYSTEM_HISTORY_NOT_UPDATED)
        return result

    if any(row.aggregate() == incoming for row in recent):
        log.debug(
            "System %s: snapshot at %s matches a recent interval", system.name, snapshot.timestamp
        )
        result.skip(notes.SYSTEM_HISTORY_CACHED)
        return result

    deadline.check("system history write")
    if current is not None:
        current.close(snapshot.timestamp)
    histories.add(
        SystemHistory.open(
            system_id=system.id, snapshot=snapshot, controlling_faction_id=controlling.id
        )
    )
    result.apply(notes.SYSTEM_HISTORY_CREATED)
    return result
