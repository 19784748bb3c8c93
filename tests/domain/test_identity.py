from __future__ import annotations

from eddn_worker.domain import notes
from eddn_worker.domain.identity import resolve_faction, resolve_factions, resolve_system
from eddn_worker.domain.model import Faction
from tests.helpers.galaxy import (
    InMemoryFactionRepository,
    InMemorySystemRepository,
    at,
    make_faction_snapshot,
    make_system_snapshot,
)


def test_first_sighting_creates_system_without_alias() -> None:
    systems = InMemorySystemRepository()

    system, resolver_notes = resolve_system(make_system_snapshot(), systems, now=at())

    assert resolver_notes == [notes.SYSTEM_CREATED]
    assert systems.systems == [system]
    assert system.name == "Sol"
    assert system.name_lower == "sol"
    assert systems.alias_rows == []
    assert systems.locked == []


def test_same_name_is_not_updated_but_locked() -> None:
    systems = InMemorySystemRepository()
    system, _ = resolve_system(make_system_snapshot(), systems, now=at())

    again, resolver_notes = resolve_system(make_system_snapshot(), systems, now=at(1))

    assert again is system
    assert resolver_notes == [notes.SYSTEM_NOT_UPDATED]
    assert systems.locked == [system.id]


def test_rename_records_previous_name_as_alias() -> None:
    systems = InMemorySystemRepository()
    system, _ = resolve_system(
        make_system_snapshot(name="Col 285 Sector AB-C d1"), systems, now=at()
    )

    _, resolver_notes = resolve_system(make_system_snapshot(name="Nova Terra"), systems, now=at(2))

    assert resolver_notes == [notes.SYSTEM_ALIAS_UPDATED]
    assert system.name == "Nova Terra"
    assert system.name_lower == "nova terra"
    assert system.updated_at == at(2)
    assert [alias.alias for alias in systems.alias_rows] == ["Col 285 Sector AB-C d1"]


def test_old_name_after_rename_does_not_flip_back() -> None:
    systems = InMemorySystemRepository()
    system, _ = resolve_system(make_system_snapshot(name="Old Name"), systems, now=at())
    resolve_system(make_system_snapshot(name="New Name"), systems, now=at(1))

    _, resolver_notes = resolve_system(make_system_snapshot(name="Old Name"), systems, now=at(2))

    assert resolver_notes == [notes.SYSTEM_NOT_UPDATED]
    assert system.name == "New Name"
    assert len(systems.alias_rows) == 1


def test_rename_is_case_sensitive() -> None:
    systems = InMemorySystemRepository()
    system, _ = resolve_system(make_system_snapshot(name="sol"), systems, now=at())

    _, resolver_notes = resolve_system(make_system_snapshot(name="Sol"), systems, now=at(1))

    assert resolver_notes == [notes.SYSTEM_ALIAS_UPDATED]
    assert system.name == "Sol"
    assert [alias.alias for alias in systems.alias_rows] == ["sol"]


def test_faction_lookup_is_case_insensitive() -> None:
    factions = InMemoryFactionRepository()
    existing = Faction(name="Mother Gaia", government="Democracy", allegiance="Federation")
    factions.add(existing)

    faction, resolver_notes = resolve_faction(
        make_faction_snapshot("MOTHER GAIA"), factions, now=at()
    )

    assert faction is existing
    assert resolver_notes == []


def test_new_faction_is_created_with_incoming_attributes() -> None:
    factions = InMemoryFactionRepository()

    faction, resolver_notes = resolve_faction(
        make_faction_snapshot("Sol Workers' Party"), factions, now=at()
    )

    assert resolver_notes == [notes.faction_created("Sol Workers' Party")]
    assert faction.name_lower == "sol workers' party"
    assert faction.government == "Democracy"
    assert faction.created_at == at()


def test_resolve_factions_keys_by_lowercased_name() -> None:
    factions = InMemoryFactionRepository()
    snapshots = [
        make_faction_snapshot("Mother Gaia"),
        make_faction_snapshot("mother gaia"),
        make_faction_snapshot("Sol Workers' Party"),
    ]

    resolved, resolver_notes = resolve_factions(snapshots, factions, now=at())

    assert set(resolved) == {"mother gaia", "sol workers' party"}
    assert len(factions.factions) == 2
    assert resolver_notes == [
        notes.faction_created("Mother Gaia"),
        notes.faction_created("Sol Workers' Party"),
    ]
