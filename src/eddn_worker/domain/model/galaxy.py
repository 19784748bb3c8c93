"""Durable identities: star systems, their former names, and factions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from eddn_worker.domain.model.entity import Entity, utcnow
from eddn_worker.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(frozen=True)
class StarPos:
    x: float
    y: float
    z: float

    def __composite_values__(self) -> tuple[float, float, float]:
        """For SQLAlchemy composite columns (adapter-side convenience)."""
        return (self.x, self.y, self.z)


@dataclass(eq=False, kw_only=True)
class System(Entity):
    """A star system keyed by its address. Systems are never deleted."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SYSTEM

    system_address: int
    name: str
    name_lower: str = ""
    star_pos: StarPos
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name_lower:
            self.name_lower = self.name.lower()

    def rename(self, new_name: str, *, at: datetime | None = None) -> SystemAlias:
        """Keep the current name as an alias and switch to ``new_name``."""

        alias = SystemAlias(
            system_id=self.id,
            alias=self.name,
            alias_lower=self.name_lower,
            recorded_at=at or utcnow(),
        )
        self.name = new_name
        self.name_lower = new_name.lower()
        self.updated_at = alias.recorded_at
        return alias


@dataclass(eq=False, kw_only=True)
class SystemAlias(Entity):
    """A former display name. Alias matching is case-sensitive."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SYSTEM_ALIAS

    system_id: UUID
    alias: str
    alias_lower: str
    recorded_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class Faction(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FACTION

    name: str
    name_lower: str = ""
    government: str | None = None
    allegiance: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.name_lower:
            self.name_lower = self.name.lower()
