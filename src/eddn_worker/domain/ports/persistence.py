"""Ports for persisting identities and validity intervals."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from eddn_worker.domain.model import (
    Faction,
    System,
    SystemAlias,
    SystemFactionHistory,
    SystemHistory,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class SystemRepository(Repository[System], Protocol):
    """Persistence contract for systems and their aliases."""

    def get_by_address(self, system_address: int) -> System | None: ...

    def lock(self, system: System) -> None:
        """Serialise concurrent writers of ``system`` until the unit of work ends."""
        ...

    def add_alias(self, alias: SystemAlias) -> None: ...

    def has_alias(self, system_id: UUID, alias: str) -> bool: ...


@runtime_checkable
class FactionRepository(Repository[Faction], Protocol):
    def get(self, faction_id: UUID) -> Faction | None: ...

    def get_by_name(self, name: str) -> Faction | None:
        """Case-insensitive lookup."""
        ...


@runtime_checkable
class SystemHistoryRepository(Repository[SystemHistory], Protocol):
    def get_open(self, system_id: UUID) -> SystemHistory | None: ...

    def valid_since(self, system_id: UUID, since: datetime) -> Sequence[SystemHistory]:
        """Rows (open or closed) with ``valid_from >= since``, ordered by ``valid_from``."""
        ...

    def for_system(self, system_id: UUID) -> Sequence[SystemHistory]: ...


@runtime_checkable
class SystemFactionHistoryRepository(Repository[SystemFactionHistory], Protocol):
    def get_open(self, system_id: UUID) -> Sequence[SystemFactionHistory]:
        """All open rows of the system, state children loaded."""
        ...

    def valid_since(self, system_id: UUID, since: datetime) -> Sequence[SystemFactionHistory]:
        """Rows (open or closed) with ``valid_from >= since``, ordered by ``valid_from``."""
        ...

    def latest_before(
        self, system_id: UUID, faction_id: UUID, before: datetime
    ) -> SystemFactionHistory | None:
        """The row with the greatest ``valid_from`` strictly earlier than ``before``."""
        ...

    def latest(self, system_id: UUID, faction_id: UUID) -> SystemFactionHistory | None:
        """The pair's row with the greatest ``valid_from``, open or closed."""
        ...

    def for_system(
        self, system_id: UUID, faction_id: UUID | None = None
    ) -> Sequence[SystemFactionHistory]: ...
