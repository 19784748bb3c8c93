"""Human-readable diagnostic notes attached to every processed message."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime

EVENT_SKIPPED: Final[str] = "Not a FSDJump or Location event. Skipping processing."

SYSTEM_CREATED: Final[str] = "System created."
SYSTEM_ALIAS_UPDATED: Final[str] = "System alias updated."
SYSTEM_NOT_UPDATED: Final[str] = "System not updated."

SYSTEM_HISTORY_NOT_UPDATED: Final[str] = "Message is the same as the current system history record."
SYSTEM_HISTORY_OLDER: Final[str] = "Message is older than the latest record."
SYSTEM_HISTORY_CACHED: Final[str] = "Message is probably cached."
SYSTEM_HISTORY_CREATED: Final[str] = "System history created."


def validation_error(err: object) -> str:
    return f"Error occurred while validating message. Skipping processing. Error: {err}"


def db_error(err: object) -> str:
    return f"Error occurred while in DB operation. Skipping processing. Error: {err}"


def system_faction_not_found(faction: str) -> str:
    return f"Unable to find the faction record for the faction {faction}."


def faction_created(faction: str) -> str:
    return f"Faction created: {faction}"


def system_faction_history_cached(faction: str) -> str:
    return f"System faction history is probably cached: {faction}"


def system_faction_history_closed(faction: str) -> str:
    return f"System faction history closed: {faction}"


def system_faction_history_created(faction: str) -> str:
    return f"System faction history created: {faction}"


def system_faction_history_not_updated(faction: str) -> str:
    return (
        "Faction in message is the same as the current system faction history record: "
        f"{faction}"
    )


def system_faction_history_older(faction: str) -> str:
    return f"Message is older than the latest record: {faction}"


def legacy_game_version(game_version: str) -> str:
    return f"Received message from legacy game version: {game_version}. Skipping processing."


def disallowed_software(software_name: str, software_version: str) -> str:
    return (
        f"Received message from disallowed software: {software_name} {software_version}. "
        "Skipping processing."
    )


def unexpected_schema(schema_ref: str) -> str:
    return f"Message schema {schema_ref} is not the journal schema. Skipping processing."


def missing_field(field: str, star_system: str | None) -> str:
    if field == "StarSystem":
        return "Received FSDJump message without StarSystem. Skipping processing."
    return (
        f"Received FSDJump message without {field}. Skipping processing. "
        f"StarSystem: {star_system}"
    )


def invalid_timestamp(timestamp: datetime) -> str:
    return (
        "Received FSDJump message with invalid timestamp: "
        f"{timestamp.isoformat()}. Skipping processing."
    )
