"""Temporal reconciliation of system and faction snapshots into validity intervals."""

from __future__ import annotations

from .factions import entered_recently, reconcile_factions
from .result import ReconcileResult
from .system import reconcile_system

__all__ = [
    "ReconcileResult",
    "entered_recently",
    "reconcile_factions",
    "reconcile_system",
]
