"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from eddn_worker.adapters.sqlalchemy.mappings import (
    faction_table,
    system_alias_table,
    system_faction_history_table,
    system_history_table,
    system_table,
)
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

    from sqlalchemy.orm import Session


class SqlAlchemyRepository[TEntity]:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)


class SqlAlchemySystemRepository(SqlAlchemyRepository[System]):
    def add(self, entity: System) -> None:
        # histories reference the row without a mapped relationship; insert it first
        self.session.add(entity)
        self.session.flush([entity])

    def get_by_address(self, system_address: int) -> System | None:
        stmt = select(System).where(system_table.c.system_address == system_address)
        return self.session.execute(stmt).scalar_one_or_none()

    def lock(self, system: System) -> None:
        # FOR UPDATE is rendered only by dialects that support it; file-backed
        # SQLite transactions begin IMMEDIATE instead (see unit_of_work.startup).
        stmt = (
            select(System)
            .where(system_table.c.id == system.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        self.session.execute(stmt).scalar_one()

    def add_alias(self, alias: SystemAlias) -> None:
        self.session.add(alias)

    def has_alias(self, system_id: UUID, alias: str) -> bool:
        stmt = (
            select(system_alias_table.c.id)
            .where(system_alias_table.c.system_id == system_id)
            .where(system_alias_table.c.alias == alias)
            .limit(1)
        )
        return self.session.execute(stmt).first() is not None


class SqlAlchemyFactionRepository(SqlAlchemyRepository[Faction]):
    def add(self, entity: Faction) -> None:
        self.session.add(entity)
        self.session.flush([entity])

    def get(self, faction_id: UUID) -> Faction | None:
        return self.session.get(Faction, faction_id)

    def get_by_name(self, name: str) -> Faction | None:
        stmt = select(Faction).where(faction_table.c.name_lower == name.lower())
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemySystemHistoryRepository(SqlAlchemyRepository[SystemHistory]):
    def get_open(self, system_id: UUID) -> SystemHistory | None:
        stmt = (
            select(SystemHistory)
            .where(system_history_table.c.system_id == system_id)
            .where(system_history_table.c.valid_to.is_(None))
            .order_by(system_history_table.c.valid_from.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def valid_since(self, system_id: UUID, since: datetime) -> Sequence[SystemHistory]:
        stmt = (
            select(SystemHistory)
            .where(system_history_table.c.system_id == system_id)
            .where(system_history_table.c.valid_from >= since)
            .order_by(system_history_table.c.valid_from)
        )
        return self.session.execute(stmt).scalars().all()

    def for_system(self, system_id: UUID) -> Sequence[SystemHistory]:
        stmt = (
            select(SystemHistory)
            .where(system_history_table.c.system_id == system_id)
            .order_by(system_history_table.c.valid_from)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemySystemFactionHistoryRepository(SqlAlchemyRepository[SystemFactionHistory]):
    def get_open(self, system_id: UUID) -> Sequence[SystemFactionHistory]:
        stmt = (
            select(SystemFactionHistory)
            .where(system_faction_history_table.c.system_id == system_id)
            .where(system_faction_history_table.c.valid_to.is_(None))
            .order_by(system_faction_history_table.c.valid_from)
        )
        return self.session.execute(stmt).scalars().all()

    def valid_since(self, system_id: UUID, since: datetime) -> Sequence[SystemFactionHistory]:
        stmt = (
            select(SystemFactionHistory)
            .where(system_faction_history_table.c.system_id == system_id)
            .where(system_faction_history_table.c.valid_from >= since)
            .order_by(system_faction_history_table.c.valid_from)
        )
        return self.session.execute(stmt).scalars().all()

    def latest_before(
        self, system_id: UUID, faction_id: UUID, before: datetime
    ) -> SystemFactionHistory | None:
        stmt = (
            select(SystemFactionHistory)
            .where(system_faction_history_table.c.system_id == system_id)
            .where(system_faction_history_table.c.faction_id == faction_id)
            .where(system_faction_history_table.c.valid_from < before)
            .order_by(system_faction_history_table.c.valid_from.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def latest(self, system_id: UUID, faction_id: UUID) -> SystemFactionHistory | None:
        stmt = (
            select(SystemFactionHistory)
            .where(system_faction_history_table.c.system_id == system_id)
            .where(system_faction_history_table.c.faction_id == faction_id)
            .order_by(system_faction_history_table.c.valid_from.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def for_system(
        self, system_id: UUID, faction_id: UUID | None = None
    ) -> Sequence[SystemFactionHistory]:
        stmt = (
            select(SystemFactionHistory)
            .where(system_faction_history_table.c.system_id == system_id)
            .order_by(system_faction_history_table.c.valid_from)
        )
        if faction_id is not None:
            stmt = stmt.where(system_faction_history_table.c.faction_id == faction_id)
        return self.session.execute(stmt).scalars().all()

