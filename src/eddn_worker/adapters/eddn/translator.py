"""Translate EDDN envelopes into domain envelopes and system snapshots."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from eddn_worker.domain import notes
from eddn_worker.domain.errors import EnvelopeValidationError
from eddn_worker.domain.model import (
    ControllingFaction,
    Envelope,
    FactionSnapshot,
    StarPos,
    StateEntry,
    SystemSnapshot,
)

from .schema import EnvelopePayload, JournalMessagePayload

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .schema import FactionPayload, StatePayload

log = getLogger(__name__)

EARLIEST_JOURNAL_TIMESTAMP: Final[datetime] = datetime(2017, 10, 7, tzinfo=UTC)

_REQUIRED_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("StarSystem", "star_system"),
    ("SystemAddress", "system_address"),
    ("timestamp", "timestamp"),
    ("StarPos", "star_pos"),
    ("SystemSecurity", "system_security"),
    ("SystemGovernment", "system_government"),
    ("SystemAllegiance", "system_allegiance"),
    ("SystemEconomy", "system_economy"),
    ("SystemSecondEconomy", "system_second_economy"),
    ("Population", "population"),
)


def decode_envelope(raw: Mapping[str, object]) -> Envelope:
    try:
        payload = EnvelopePayload.model_validate(raw)
    except ValidationError as exc:
        raise EnvelopeValidationError([notes.validation_error(exc)]) from exc

    header = payload.header
    event = payload.message.get("event")
    raw_header = raw.get("header")
    return Envelope(
        schema_ref=payload.schema_ref,
        software_name=header.software_name,
        software_version=header.software_version,
        game_version=header.game_version,
        gateway_timestamp=header.gateway_timestamp,
        event=event if isinstance(event, str) else None,
        header=dict(raw_header) if isinstance(raw_header, dict) else {},
        message=dict(payload.message),
    )


def check_jump_message(payload: JournalMessagePayload, *, now: datetime) -> list[str]:
    """Return one reason per missing or implausible field of a jump/location message."""

    reasons: list[str] = []
    timestamp = payload.timestamp
    if timestamp is not None and not EARLIEST_JOURNAL_TIMESTAMP <= timestamp <= now:
        reasons.append(notes.invalid_timestamp(timestamp))
    for journal_name, attribute in _REQUIRED_FIELDS:
        if getattr(payload, attribute) is None:
            reasons.append(notes.missing_field(journal_name, payload.star_system))
    if not payload.factions:
        reasons.append(notes.missing_field("Factions", payload.star_system))
    if payload.system_faction is None:
        reasons.append(notes.missing_field("SystemFaction", payload.star_system))
    return reasons


def _states(states: Iterable[StatePayload]) -> tuple[StateEntry, ...]:
    return tuple(StateEntry(state=state.state, trend=state.trend) for state in states)


def _faction_snapshot(faction: FactionPayload) -> FactionSnapshot:
    return FactionSnapshot(
        name=faction.name,
        government=faction.government,
        allegiance=faction.allegiance,
        influence=faction.influence,
        happiness=faction.happiness,
        faction_state=faction.faction_state,
        active_states=_states(faction.active_states),
        pending_states=_states(faction.pending_states),
        recovering_states=_states(faction.recovering_states),
    )


def to_system_snapshot(envelope: Envelope, *, now: datetime) -> SystemSnapshot:
    try:
        payload = JournalMessagePayload.model_validate(envelope.message)
    except ValidationError as exc:
        raise EnvelopeValidationError([notes.validation_error(exc)]) from exc

    reasons = check_jump_message(payload, now=now)
    if reasons:
        raise EnvelopeValidationError(reasons)

    # check_jump_message guarantees every field below is present
    assert payload.timestamp is not None
    assert payload.system_address is not None
    assert payload.star_system is not None
    assert payload.star_pos is not None
    assert payload.population is not None
    assert payload.system_faction is not None
    x, y, z = payload.star_pos
    return SystemSnapshot(
        timestamp=payload.timestamp,
        system_address=payload.system_address,
        name=payload.star_system,
        star_pos=StarPos(x=x, y=y, z=z),
        population=payload.population,
        government=payload.system_government or "",
        allegiance=payload.system_allegiance or "",
        security=payload.system_security or "",
        economy=payload.system_economy or "",
        second_economy=payload.system_second_economy or "",
        controlling_faction=ControllingFaction(
            name=payload.system_faction.name,
            faction_state=payload.system_faction.faction_state,
        ),
        factions=tuple(_faction_snapshot(faction) for faction in payload.factions or ()),
        gateway_timestamp=envelope.gateway_timestamp,
    )


class JournalDecoder:
    """``EnvelopeDecoder`` for the EDDN journal schema."""

    def decode(self, raw: Mapping[str, object]) -> Envelope:
        return decode_envelope(raw)

    def to_snapshot(self, envelope: Envelope, *, now: datetime) -> SystemSnapshot:
        snapshot = to_system_snapshot(envelope, now=now)
        log.debug(
            "Decoded %s for %s (%d factions)",
            envelope.event,
            snapshot.name,
            len(snapshot.factions),
        )
        return snapshot
