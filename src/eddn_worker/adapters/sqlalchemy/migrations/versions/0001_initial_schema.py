"""Initial schema: systems, factions, validity histories and the processing audit.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00

"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

OPEN_INTERVAL = sa.text("valid_to IS NULL")


def _state_table(name: str, *, with_trend: bool) -> None:
    columns: list[sa.Column[Any]] = [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("system_faction_history_id", sa.Uuid(), nullable=False),
        sa.Column("state", sa.String(), nullable=False),
    ]
    if with_trend:
        columns.append(sa.Column("trend", sa.Float(), nullable=True))
    op.create_table(
        name,
        *columns,
        sa.ForeignKeyConstraint(
            ["system_faction_history_id"],
            ["system_faction_history.id"],
            name=f"fk_{name}_system_faction_history_id_system_faction_history",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=f"pk_{name}"),
    )
    op.create_index(
        f"ix_{name}_system_faction_history_id", name, ["system_faction_history_id"]
    )


def upgrade() -> None:
    op.create_table(
        "system",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("system_address", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("name_lower", sa.String(), nullable=False),
        sa.Column("star_pos_x", sa.Float(), nullable=False),
        sa.Column("star_pos_y", sa.Float(), nullable=False),
        sa.Column("star_pos_z", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_system"),
        sa.UniqueConstraint("system_address", name="uq_system_system_system_address"),
    )
    op.create_index("ix_system_name_lower", "system", ["name_lower"])

    op.create_table(
        "faction",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("name_lower", sa.String(), nullable=False),
        sa.Column("government", sa.String(), nullable=True),
        sa.Column("allegiance", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_faction"),
        sa.UniqueConstraint("name_lower", name="uq_faction_faction_name_lower"),
    )

    op.create_table(
        "system_alias",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("system_id", sa.Uuid(), nullable=False),
        sa.Column("alias", sa.String(), nullable=False),
        sa.Column("alias_lower", sa.String(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["system_id"], ["system.id"], name="fk_system_alias_system_id_system"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_system_alias"),
        sa.UniqueConstraint(
            "system_id", "alias", name="uq_system_alias_system_alias_system_id"
        ),
    )
    op.create_index("ix_system_alias_alias_lower", "system_alias", ["alias_lower"])

    op.create_table(
        "system_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("system_id", sa.Uuid(), nullable=False),
        sa.Column("population", sa.BigInteger(), nullable=False),
        sa.Column("government", sa.String(), nullable=False),
        sa.Column("allegiance", sa.String(), nullable=False),
        sa.Column("security", sa.String(), nullable=False),
        sa.Column("economy", sa.String(), nullable=False),
        sa.Column("second_economy", sa.String(), nullable=False),
        sa.Column("controlling_faction_id", sa.Uuid(), nullable=False),
        sa.Column("controlling_faction_state", sa.String(), nullable=True),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_to", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["system_id"], ["system.id"], name="fk_system_history_system_id_system"
        ),
        sa.ForeignKeyConstraint(
            ["controlling_faction_id"],
            ["faction.id"],
            name="fk_system_history_controlling_faction_id_faction",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_system_history"),
    )
    op.create_index(
        "ix_system_history_system_id_valid_from", "system_history", ["system_id", "valid_from"]
    )
    op.create_index(
        "uq_system_history_open",
        "system_history",
        ["system_id"],
        unique=True,
        sqlite_where=OPEN_INTERVAL,
        postgresql_where=OPEN_INTERVAL,
    )

    op.create_table(
        "system_faction_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("system_id", sa.Uuid(), nullable=False),
        sa.Column("faction_id", sa.Uuid(), nullable=False),
        sa.Column("influence", sa.Float(), nullable=False),
        sa.Column("happiness", sa.String(), nullable=True),
        sa.Column("faction_state", sa.String(), nullable=True),
        sa.Column("valid_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("valid_to", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["system_id"], ["system.id"], name="fk_system_faction_history_system_id_system"
        ),
        sa.ForeignKeyConstraint(
            ["faction_id"], ["faction.id"], name="fk_system_faction_history_faction_id_faction"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_system_faction_history"),
    )
    op.create_index(
        "ix_system_faction_history_system_id_valid_from",
        "system_faction_history",
        ["system_id", "valid_from"],
    )
    op.create_index(
        "uq_system_faction_history_open",
        "system_faction_history",
        ["system_id", "faction_id"],
        unique=True,
        sqlite_where=OPEN_INTERVAL,
        postgresql_where=OPEN_INTERVAL,
    )

    _state_table("active_state", with_trend=False)
    _state_table("pending_state", with_trend=True)
    _state_table("recovering_state", with_trend=True)

    op.create_table(
        "processing_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("schema_ref", sa.String(), nullable=False),
        sa.Column("header", sa.JSON(), nullable=False),
        sa.Column("message", sa.JSON(), nullable=False),
        sa.Column("applied", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.JSON(), nullable=False),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_processing_record"),
    )
    op.create_index(
        "ix_processing_record_received_at", "processing_record", ["received_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_processing_record_received_at", table_name="processing_record")
    op.drop_table("processing_record")
    for name in ("recovering_state", "pending_state", "active_state"):
        op.drop_index(f"ix_{name}_system_faction_history_id", table_name=name)
        op.drop_table(name)
    op.drop_index("uq_system_faction_history_open", table_name="system_faction_history")
    op.drop_index(
        "ix_system_faction_history_system_id_valid_from", table_name="system_faction_history"
    )
    op.drop_table("system_faction_history")
    op.drop_index("uq_system_history_open", table_name="system_history")
    op.drop_index("ix_system_history_system_id_valid_from", table_name="system_history")
    op.drop_table("system_history")
    op.drop_index("ix_system_alias_alias_lower", table_name="system_alias")
    op.drop_table("system_alias")
    op.drop_table("faction")
    op.drop_index("ix_system_name_lower", table_name="system")
    op.drop_table("system")
