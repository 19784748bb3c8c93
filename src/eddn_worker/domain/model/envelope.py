"""Decoded envelope as seen by the gate and the coordinator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class Envelope:
    """Envelope header fields the gate inspects, plus the raw parts for the audit trail."""

    schema_ref: str
    software_name: str
    software_version: str
    game_version: str | None = None
    gateway_timestamp: datetime | None = None
    event: str | None = None
    header: dict[str, Any] = field(default_factory=dict[str, Any])
    message: dict[str, Any] = field(default_factory=dict[str, Any])
