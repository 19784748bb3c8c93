"""Public domain model surface."""

from __future__ import annotations

from eddn_worker.domain.model.audit import ProcessingRecord
from eddn_worker.domain.model.entity import Entity, new_id, utcnow
from eddn_worker.domain.model.enums import RECONCILED_EVENTS, EntityType, JournalEvent
from eddn_worker.domain.model.envelope import Envelope
from eddn_worker.domain.model.galaxy import Faction, StarPos, System, SystemAlias
from eddn_worker.domain.model.history import (
    ActiveState,
    IntervalError,
    PendingState,
    RecoveringState,
    SystemFactionHistory,
    SystemHistory,
)
from eddn_worker.domain.model.snapshot import (
    ControllingFaction,
    FactionPresenceState,
    FactionSnapshot,
    StateEntry,
    SystemAggregateState,
    SystemSnapshot,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    "utcnow",
    # enums
    "EntityType",
    "JournalEvent",
    "RECONCILED_EVENTS",
    # envelope
    "Envelope",
    # identities
    "StarPos",
    "System",
    "SystemAlias",
    "Faction",
    # history
    "IntervalError",
    "SystemHistory",
    "SystemFactionHistory",
    "ActiveState",
    "PendingState",
    "RecoveringState",
    # snapshots
    "StateEntry",
    "FactionSnapshot",
    "ControllingFaction",
    "SystemSnapshot",
    "SystemAggregateState",
    "FactionPresenceState",
    # audit
    "ProcessingRecord",
]
