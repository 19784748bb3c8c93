"""Immutable views of one journal message, as consumed by reconciliation.

Snapshots are built by the EDDN adapter from a validated envelope. The
``*State`` key types give the comparison semantics used to decide whether a
snapshot carries new information.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from eddn_worker.domain.model.galaxy import StarPos


@dataclass(frozen=True, slots=True)
class StateEntry:
    state: str
    trend: float | None = None


type KeyedStates = frozenset[tuple[str, float | None]]


def _keyed_states(entries: Iterable[StateEntry], *, with_trend: bool) -> KeyedStates:
    keyed = {entry.state: (entry.trend if with_trend else None) for entry in entries}
    return frozenset(keyed.items())


@dataclass(frozen=True, slots=True)
class FactionSnapshot:
    name: str
    government: str | None
    allegiance: str | None
    influence: float
    happiness: str | None
    faction_state: str | None
    active_states: tuple[StateEntry, ...] = ()
    pending_states: tuple[StateEntry, ...] = ()
    recovering_states: tuple[StateEntry, ...] = ()

    @property
    def name_lower(self) -> str:
        return self.name.lower()

    def presence(self) -> FactionPresenceState:
        return FactionPresenceState.build(
            influence=self.influence,
            happiness=self.happiness,
            faction_state=self.faction_state,
            active_states=self.active_states,
            pending_states=self.pending_states,
            recovering_states=self.recovering_states,
        )


@dataclass(frozen=True, slots=True)
class ControllingFaction:
    name: str
    faction_state: str | None

    @property
    def name_lower(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class SystemSnapshot:
    timestamp: datetime
    system_address: int
    name: str
    star_pos: StarPos
    population: int
    government: str
    allegiance: str
    security: str
    economy: str
    second_economy: str
    controlling_faction: ControllingFaction
    factions: tuple[FactionSnapshot, ...] = field(default_factory=tuple)
    gateway_timestamp: datetime | None = None

    def aggregate(self, controlling_faction_id: UUID) -> SystemAggregateState:
        return SystemAggregateState(
            population=self.population,
            government=self.government,
            allegiance=self.allegiance,
            security=self.security,
            economy=self.economy,
            second_economy=self.second_economy,
            controlling_faction_id=controlling_faction_id,
            controlling_faction_state=self.controlling_faction.faction_state,
        )


@dataclass(frozen=True, slots=True)
class SystemAggregateState:
    """The fields that make one system-history interval distinct from another."""

    population: int
    government: str
    allegiance: str
    security: str
    economy: str
    second_economy: str
    controlling_faction_id: UUID
    controlling_faction_state: str | None


@dataclass(frozen=True, slots=True)
class FactionPresenceState:
    """The fields that make one faction-presence interval distinct from another.

    State lists compare as sets keyed by state name: order never matters, pending
    and recovering states also compare their trend, active states only the name.
    """

    influence: float
    happiness: str | None
    faction_state: str | None
    active_states: KeyedStates
    pending_states: KeyedStates
    recovering_states: KeyedStates

    @classmethod
    def build(
        cls,
        *,
        influence: float,
        happiness: str | None,
        faction_state: str | None,
        active_states: Iterable[StateEntry],
        pending_states: Iterable[StateEntry],
        recovering_states: Iterable[StateEntry],
    ) -> FactionPresenceState:
        return cls(
            influence=influence,
            happiness=happiness,
            faction_state=faction_state,
            active_states=_keyed_states(active_states, with_trend=False),
            pending_states=_keyed_states(pending_states, with_trend=True),
            recovering_states=_keyed_states(recovering_states, with_trend=True),
        )
