"""Map journal identifiers onto durable system and faction entities."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from eddn_worker.domain import notes
from eddn_worker.domain.model import Faction, System

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from eddn_worker.domain.model import FactionSnapshot, SystemSnapshot
    from eddn_worker.domain.ports import FactionRepository, SystemRepository

log = getLogger(__name__)


def resolve_system(
    snapshot: SystemSnapshot, systems: SystemRepository, *, now: datetime
) -> tuple[System, list[str]]:
    """Find or create the system behind ``snapshot.system_address``.

    A changed name keeps the previous one as an alias, unless the incoming name
    already is a known alias (a client still reporting the old name).
    """

    system = systems.get_by_address(snapshot.system_address)
    if system is None:
        system = System(
            system_address=snapshot.system_address,
            name=snapshot.name,
            star_pos=snapshot.star_pos,
            created_at=now,
        )
        systems.add(system)
        log.info("Created system %s (%s)", system.name, system.system_address)
        return system, [notes.SYSTEM_CREATED]

    systems.lock(system)
    if snapshot.name == system.name or systems.has_alias(system.id, snapshot.name):
        return system, [notes.SYSTEM_NOT_UPDATED]

    previous_name = system.name
    systems.add_alias(system.rename(snapshot.name, at=now))
    log.info(
        "Renamed system %s from %s to %s", system.system_address, previous_name, system.name
    )
    return system, [notes.SYSTEM_ALIAS_UPDATED]


def resolve_faction(
    snapshot: FactionSnapshot, factions: FactionRepository, *, now: datetime
) -> tuple[Faction, list[str]]:
    faction = factions.get_by_name(snapshot.name)
    if faction is not None:
        return faction, []

    faction = Faction(
        name=snapshot.name,
        government=snapshot.government,
        allegiance=snapshot.allegiance,
        created_at=now,
    )
    factions.add(faction)
    return faction, [notes.faction_created(snapshot.name)]


def resolve_factions(
    snapshots: Iterable[FactionSnapshot], factions: FactionRepository, *, now: datetime
) -> tuple[dict[str, Faction], list[str]]:
    """Resolve every faction of a message, keyed by lowercased name."""

    resolved: dict[str, Faction] = {}
    collected: list[str] = []
    for snapshot in snapshots:
        if snapshot.name_lower in resolved:
            continue
        faction, faction_notes = resolve_faction(snapshot, factions, now=now)
        resolved[snapshot.name_lower] = faction
        collected.extend(faction_notes)
    return resolved, collected
