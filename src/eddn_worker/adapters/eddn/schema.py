"""Pydantic models describing EDDN envelopes and journal payloads."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class EddnBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class HeaderPayload(EddnBaseModel):
    game_version: str | None = Field(default=None, alias="gameversion")
    game_build: str | None = Field(default=None, alias="gamebuild")
    software_name: str = Field(alias="softwareName")
    software_version: str = Field(alias="softwareVersion")
    uploader_id: str | None = Field(default=None, alias="uploaderID")
    gateway_timestamp: datetime | None = Field(default=None, alias="gatewayTimestamp")

    _normalize_game_version = field_validator("game_version", mode="before")(_blank_to_none)
    _normalize_gateway_timestamp = field_validator("gateway_timestamp", mode="after")(_as_utc)


class EnvelopePayload(EddnBaseModel):
    """The outer envelope. ``message`` stays raw until the gate accepts it."""

    schema_ref: str = Field(alias="$schemaRef")
    header: HeaderPayload
    message: dict[str, Any]


class StatePayload(EddnBaseModel):
    state: str = Field(alias="State")
    trend: float | None = Field(default=None, alias="Trend")


class FactionPayload(EddnBaseModel):
    name: str = Field(alias="Name")
    government: str | None = Field(default=None, alias="Government")
    allegiance: str | None = Field(default=None, alias="Allegiance")
    influence: float = Field(alias="Influence")
    happiness: str | None = Field(default=None, alias="Happiness")
    faction_state: str | None = Field(default=None, alias="FactionState")
    active_states: list[StatePayload] = Field(default_factory=list, alias="ActiveStates")
    pending_states: list[StatePayload] = Field(default_factory=list, alias="PendingStates")
    recovering_states: list[StatePayload] = Field(
        default_factory=list, alias="RecoveringStates"
    )

    @field_validator("active_states", "pending_states", "recovering_states", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return [] if value is None else value


class SystemFactionPayload(EddnBaseModel):
    name: str = Field(alias="Name")
    faction_state: str | None = Field(default=None, alias="FactionState")


class JournalMessagePayload(EddnBaseModel):
    """An ``FSDJump`` or ``Location`` journal entry.

    Everything but the event name is optional here; missing fields are reported
    by the translator as validation reasons rather than raised as parse errors.
    """

    event: str
    timestamp: datetime | None = None
    star_system: str | None = Field(default=None, alias="StarSystem")
    system_address: int | None = Field(default=None, alias="SystemAddress")
    star_pos: tuple[float, float, float] | None = Field(default=None, alias="StarPos")
    system_allegiance: str | None = Field(default=None, alias="SystemAllegiance")
    system_economy: str | None = Field(default=None, alias="SystemEconomy")
    system_second_economy: str | None = Field(default=None, alias="SystemSecondEconomy")
    system_government: str | None = Field(default=None, alias="SystemGovernment")
    system_security: str | None = Field(default=None, alias="SystemSecurity")
    population: int | None = Field(default=None, alias="Population")
    factions: list[FactionPayload] | None = Field(default=None, alias="Factions")
    system_faction: SystemFactionPayload | None = Field(default=None, alias="SystemFaction")

    _normalize_timestamp = field_validator("timestamp", mode="after")(_as_utc)
