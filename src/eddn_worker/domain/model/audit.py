"""Audit trail of every inbound message and what became of it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from eddn_worker.domain.model.entity import Entity, utcnow
from eddn_worker.domain.model.enums import EntityType

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class ProcessingRecord(Entity):
    """Append-only record; never updated after insertion."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PROCESSING_RECORD

    schema_ref: str
    header: dict[str, Any] = field(default_factory=dict[str, Any])
    message: dict[str, Any] = field(default_factory=dict[str, Any])
    applied: bool = False
    notes: list[str] = field(default_factory=list[str])
    received_at: datetime = field(default_factory=utcnow)
