"""Validity intervals for system and faction-presence state.

A history row is open while ``valid_to`` is ``None``. The only mutation a row
ever sees is :meth:`close`; everything else is append-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from eddn_worker.domain.model.entity import Entity
from eddn_worker.domain.model.enums import EntityType
from eddn_worker.domain.model.snapshot import (
    FactionPresenceState,
    StateEntry,
    SystemAggregateState,
)

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from eddn_worker.domain.model.snapshot import FactionSnapshot, SystemSnapshot


class IntervalError(ValueError):
    """Raised when a close would produce an invalid interval."""


@dataclass(eq=False, kw_only=True)
class _Interval(Entity):
    valid_from: datetime
    valid_to: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.valid_to is None

    def close(self, at: datetime) -> None:
        if self.valid_to is not None:
            raise IntervalError(
                f"{self.entity_type} {self.id} is already closed at {self.valid_to}"
            )
        if at < self.valid_from:
            raise IntervalError(
                f"Cannot close {self.entity_type} {self.id} at {at}, "
                f"before it opened ({self.valid_from})"
            )
        self.valid_to = at

    def is_newer_than(self, timestamp: datetime) -> bool:
        """Whether a snapshot taken at ``timestamp`` predates this interval."""

        if timestamp < self.valid_from:
            return True
        return self.valid_to is not None and timestamp < self.valid_to


@dataclass(eq=False, kw_only=True)
class SystemHistory(_Interval):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SYSTEM_HISTORY

    system_id: UUID
    population: int
    government: str
    allegiance: str
    security: str
    economy: str
    second_economy: str
    controlling_faction_id: UUID
    controlling_faction_state: str | None = None

    @classmethod
    def open(
        cls, *, system_id: UUID, snapshot: SystemSnapshot, controlling_faction_id: UUID
    ) -> SystemHistory:
        return cls(
            system_id=system_id,
            population=snapshot.population,
            government=snapshot.government,
            allegiance=snapshot.allegiance,
            security=snapshot.security,
            economy=snapshot.economy,
            second_economy=snapshot.second_economy,
            controlling_faction_id=controlling_faction_id,
            controlling_faction_state=snapshot.controlling_faction.faction_state,
            valid_from=snapshot.timestamp,
        )

    def aggregate(self) -> SystemAggregateState:
        return SystemAggregateState(
            population=self.population,
            government=self.government,
            allegiance=self.allegiance,
            security=self.security,
            economy=self.economy,
            second_economy=self.second_economy,
            controlling_faction_id=self.controlling_faction_id,
            controlling_faction_state=self.controlling_faction_state,
        )


@dataclass(eq=False, kw_only=True)
class ActiveState(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.ACTIVE_STATE

    system_faction_history_id: UUID
    state: str


@dataclass(eq=False, kw_only=True)
class PendingState(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PENDING_STATE

    system_faction_history_id: UUID
    state: str
    trend: float | None = None


@dataclass(eq=False, kw_only=True)
class RecoveringState(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.RECOVERING_STATE

    system_faction_history_id: UUID
    state: str
    trend: float | None = None


@dataclass(eq=False, kw_only=True)
class SystemFactionHistory(_Interval):
    """One faction's presence in one system. State children are written once, with the row."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SYSTEM_FACTION_HISTORY

    system_id: UUID
    faction_id: UUID
    influence: float
    happiness: str | None = None
    faction_state: str | None = None

    active_states: list[ActiveState] = field(default_factory=list["ActiveState"], repr=False)
    pending_states: list[PendingState] = field(default_factory=list["PendingState"], repr=False)
    recovering_states: list[RecoveringState] = field(
        default_factory=list["RecoveringState"], repr=False
    )

    @classmethod
    def open(
        cls,
        *,
        system_id: UUID,
        faction_id: UUID,
        snapshot: FactionSnapshot,
        valid_from: datetime,
    ) -> SystemFactionHistory:
        history = cls(
            system_id=system_id,
            faction_id=faction_id,
            influence=snapshot.influence,
            happiness=snapshot.happiness,
            faction_state=snapshot.faction_state,
            valid_from=valid_from,
        )
        history.active_states = [
            ActiveState(system_faction_history_id=history.id, state=entry.state)
            for entry in snapshot.active_states
        ]
        history.pending_states = [
            PendingState(system_faction_history_id=history.id, state=entry.state, trend=entry.trend)
            for entry in snapshot.pending_states
        ]
        history.recovering_states = [
            RecoveringState(
                system_faction_history_id=history.id, state=entry.state, trend=entry.trend
            )
            for entry in snapshot.recovering_states
        ]
        return history

    def presence(self) -> FactionPresenceState:
        return FactionPresenceState.build(
            influence=self.influence,
            happiness=self.happiness,
            faction_state=self.faction_state,
            active_states=(StateEntry(state.state) for state in self.active_states),
            pending_states=(StateEntry(state.state, state.trend) for state in self.pending_states),
            recovering_states=(
                StateEntry(state.state, state.trend) for state in self.recovering_states
            ),
        )