"""SQLAlchemy mapping metadata for the eddn-worker domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    Index,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
    text,
)
from sqlalchemy.orm import composite, configure_mappers, relationship

from eddn_worker.domain.model import (
    ActiveState,
    Faction,
    PendingState,
    ProcessingRecord,
    RecoveringState,
    StarPos,
    System,
    SystemAlias,
    SystemFactionHistory,
    SystemHistory,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

# Partial-index predicate shared by the "one open interval" constraints.
OPEN_INTERVAL = text("valid_to IS NULL")


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Identities ------------------------------------------------------------------

system_table = Table(
    "system",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("system_address", BigInteger, nullable=False, unique=True),
    Column("name", String, nullable=False),
    Column("name_lower", String, nullable=False, index=True),
    Column("star_pos_x", Float, nullable=False),
    Column("star_pos_y", Float, nullable=False),
    Column("star_pos_z", Float, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
)

system_alias_table = Table(
    "system_alias",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("system_id", UUIDColumnType, ForeignKey("system.id"), nullable=False),
    Column("alias", String, nullable=False),
    Column("alias_lower", String, nullable=False, index=True),
    Column("recorded_at", UTCDateTime(), nullable=False),
    UniqueConstraint("system_id", "alias"),
)

faction_table = Table(
    "faction",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("name_lower", String, nullable=False, unique=True),
    Column("government", String, nullable=True),
    Column("allegiance", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
)

# Histories -------------------------------------------------------------------

system_history_table = Table(
    "system_history",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("system_id", UUIDColumnType, ForeignKey("system.id"), nullable=False),
    Column("population", BigInteger, nullable=False),
    Column("government", String, nullable=False),
    Column("allegiance", String, nullable=False),
    Column("security", String, nullable=False),
    Column("economy", String, nullable=False),
    Column("second_economy", String, nullable=False),
    Column("controlling_faction_id", UUIDColumnType, ForeignKey("faction.id"), nullable=False),
    Column("controlling_faction_state", String, nullable=True),
    Column("valid_from", UTCDateTime(), nullable=False),
    Column("valid_to", UTCDateTime(), nullable=True),
    Index("ix_system_history_system_id_valid_from", "system_id", "valid_from"),
    Index(
        "uq_system_history_open",
        "system_id",
        unique=True,
        sqlite_where=OPEN_INTERVAL,
        postgresql_where=OPEN_INTERVAL,
    ),
)

system_faction_history_table = Table(
    "system_faction_history",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("system_id", UUIDColumnType, ForeignKey("system.id"), nullable=False),
    Column("faction_id", UUIDColumnType, ForeignKey("faction.id"), nullable=False),
    Column("influence", Float, nullable=False),
    Column("happiness", String, nullable=True),
    Column("faction_state", String, nullable=True),
    Column("valid_from", UTCDateTime(), nullable=False),
    Column("valid_to", UTCDateTime(), nullable=True),
    Index("ix_system_faction_history_system_id_valid_from", "system_id", "valid_from"),
    Index(
        "uq_system_faction_history_open",
        "system_id",
        "faction_id",
        unique=True,
        sqlite_where=OPEN_INTERVAL,
        postgresql_where=OPEN_INTERVAL,
    ),
)


def _state_table(name: str, *, with_trend: bool) -> Table:
    columns: list[Column[Any]] = [
        Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
        Column(
            "system_faction_history_id",
            UUIDColumnType,
            ForeignKey("system_faction_history.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        Column("state", String, nullable=False),
    ]
    if with_trend:
        columns.append(Column("trend", Float, nullable=True))
    return Table(name, mapper_registry.metadata, *columns)


active_state_table = _state_table("active_state", with_trend=False)
pending_state_table = _state_table("pending_state", with_trend=True)
recovering_state_table = _state_table("recovering_state", with_trend=True)

# Audit -----------------------------------------------------------------------

processing_record_table = Table(
    "processing_record",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("schema_ref", String, nullable=False),
    Column("header", JSON, nullable=False),
    Column("message", JSON, nullable=False),
    Column("applied", Boolean, nullable=False, default=False),
    Column("notes", JSON, nullable=False),
    Column("received_at", UTCDateTime(), nullable=False, index=True),
)


def _state_relationship(target: type[Any]) -> orm.RelationshipProperty[Any]:
    return relationship(
        target,
        cascade="all, delete-orphan",
        lazy="selectin",
    )


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        System,
        system_table,
        properties={
            "star_pos": composite(
                StarPos,
                system_table.c.star_pos_x,
                system_table.c.star_pos_y,
                system_table.c.star_pos_z,
            ),
        },
    )
    mapper_registry.map_imperatively(SystemAlias, system_alias_table)
    mapper_registry.map_imperatively(Faction, faction_table)
    mapper_registry.map_imperatively(SystemHistory, system_history_table)

    mapper_registry.map_imperatively(ActiveState, active_state_table)
    mapper_registry.map_imperatively(PendingState, pending_state_table)
    mapper_registry.map_imperatively(RecoveringState, recovering_state_table)
    mapper_registry.map_imperatively(
        SystemFactionHistory,
        system_faction_history_table,
        properties={
            "active_states": _state_relationship(ActiveState),
            "pending_states": _state_relationship(PendingState),
            "recovering_states": _state_relationship(RecoveringState),
        },
    )

    mapper_registry.map_imperatively(ProcessingRecord, processing_record_table)

    configure_mappers()
    return mapper_registry
