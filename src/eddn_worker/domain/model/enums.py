"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Discriminator used in logs and diagnostics."""

    SYSTEM = "system"
    SYSTEM_ALIAS = "system_alias"
    FACTION = "faction"
    SYSTEM_HISTORY = "system_history"
    SYSTEM_FACTION_HISTORY = "system_faction_history"
    ACTIVE_STATE = "active_state"
    PENDING_STATE = "pending_state"
    RECOVERING_STATE = "recovering_state"
    PROCESSING_RECORD = "processing_record"


class JournalEvent(StrEnum):
    FSD_JUMP = "FSDJump"
    LOCATION = "Location"


RECONCILED_EVENTS: frozenset[str] = frozenset(JournalEvent)
