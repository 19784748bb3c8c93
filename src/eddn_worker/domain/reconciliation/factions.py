"""Per-system, per-faction presence timelines.

Each message lists the factions present in a system at one instant. Compared
against the open intervals this yields three groups:

- *removed*: open now but absent from the message,
- *present*: open now and still listed,
- *added*: listed but not open.

Removal is the delicate case. Messages arrive out of order, so a message that
lacks a faction may simply predate that faction's arrival. The faction's
intervals inside the trailing window are used as evidence: a gap between two
consecutive intervals, or between the last interval before the window and the
first one inside it, means the faction entered recently, and the apparent
removal is treated as a late redelivery instead of a real exit.
"""

from __future__ import annotations

from collections import defaultdict
from itertools import pairwise
from logging import getLogger
from typing import TYPE_CHECKING

from eddn_worker.domain import notes
from eddn_worker.domain.errors import IntegrityViolation
from eddn_worker.domain.model import SystemFactionHistory

from .result import ReconcileResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime
    from uuid import UUID

    from eddn_worker.domain.model import Faction, FactionSnapshot, System, SystemSnapshot
    from eddn_worker.domain.ports import FactionRepository, SystemFactionHistoryRepository
    from eddn_worker.domain.time_windows import Deadline

log = getLogger(__name__)


def entered_recently(
    recent: Sequence[SystemFactionHistory],
    preceding: SystemFactionHistory | None,
) -> bool:
    """Whether ``recent`` (ordered by ``valid_from``) shows the faction arriving inside the window.

    ``preceding`` is the faction's last interval that started before the window.
    Without any interval before the window there is no evidence of a recent
    entry and the removal counts as real.
    """

    for previous, following in pairwise(recent):
        if previous.valid_to is not None and following.valid_from > previous.valid_to:
            return True

    if not recent or preceding is None or preceding.valid_to is None:
        return False
    return preceding.valid_to < recent[0].valid_from


def _group_by_faction(
    rows: Sequence[SystemFactionHistory],
) -> dict[UUID, list[SystemFactionHistory]]:
    grouped: dict[UUID, list[SystemFactionHistory]] = defaultdict(list)
    for row in sorted(rows, key=lambda row: row.valid_from):
        grouped[row.faction_id].append(row)
    return grouped


def _incoming_by_faction(
    snapshot: SystemSnapshot, resolved_factions: Mapping[str, Faction]
) -> dict[UUID, tuple[Faction, FactionSnapshot]]:
    incoming: dict[UUID, tuple[Faction, FactionSnapshot]] = {}
    for faction_snapshot in snapshot.factions:
        faction = resolved_factions.get(faction_snapshot.name_lower)
        if faction is None:
            raise IntegrityViolation(notes.system_faction_not_found(faction_snapshot.name))
        incoming.setdefault(faction.id, (faction, faction_snapshot))
    return incoming


def _faction_name(factions: FactionRepository, faction_id: UUID) -> str:
    faction = factions.get(faction_id)
    return faction.name if faction is not None else str(faction_id)


def reconcile_factions(
    system: System,
    snapshot: SystemSnapshot,
    resolved_factions: Mapping[str, Faction],
    histories: SystemFactionHistoryRepository,
    factions: FactionRepository,
    *,
    window_start: datetime,
    deadline: Deadline,
) -> ReconcileResult:
    """Close and open faction-presence intervals for one system snapshot."""

    deadline.check("faction history lookup")
    open_rows = {row.faction_id: row for row in histories.get_open(system.id)}
    recent_by_faction = _group_by_faction(histories.valid_since(system.id, window_start))
    incoming = _incoming_by_faction(snapshot, resolved_factions)
    timestamp = snapshot.timestamp

    result = ReconcileResult()

    removed = [faction_id for faction_id in open_rows if faction_id not in incoming]
    for faction_id in removed:
        deadline.check("faction removal")
        row = open_rows[faction_id]
        name = _faction_name(factions, faction_id)
        if row.is_newer_than(timestamp):
            result.skip(notes.system_faction_history_older(name))
            continue
        recent = recent_by_faction.get(faction_id, [])
        preceding = (
            histories.latest_before(system.id, faction_id, window_start) if recent else None
        )
        if entered_recently(recent, preceding):
            log.debug("Faction %s entered %s recently; keeping it open", name, system.name)
            result.skip(notes.system_faction_history_cached(name))
            continue
        row.close(timestamp)
        result.apply(notes.system_faction_history_closed(name))

    for faction_id, (faction, faction_snapshot) in incoming.items():
        deadline.check("faction presence")
        name = faction_snapshot.name
        row = open_rows.get(faction_id)
        recent = recent_by_faction.get(faction_id, [])

        # a closed interval outside the window may still cover the timestamp
        latest = row if row is not None else histories.latest(system.id, faction_id)
        if latest is not None and latest.is_newer_than(timestamp):
            result.skip(notes.system_faction_history_older(name))
            continue

        presence = faction_snapshot.presence()
        if row is not None and row.presence() == presence:
            result.skip(notes.system_faction_history_not_updated(name))
            continue
        if any(candidate.presence() == presence for candidate in recent):
            result.skip(notes.system_faction_history_cached(name))
            continue

        if row is not None:
            row.close(timestamp)
        histories.add(
            SystemFactionHistory.open(
                system_id=system.id,
                faction_id=faction.id,
                snapshot=faction_snapshot,
                valid_from=timestamp,
            )
        )
        result.apply(notes.system_faction_history_created(name))

    return result
