"""Outcome of reconciling one snapshot against stored history."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class ReconcileResult:
    applied: bool = False
    notes: list[str] = field(default_factory=list[str])

    def skip(self, note: str) -> None:
        self.notes.append(note)

    def apply(self, note: str) -> None:
        self.applied = True
        self.notes.append(note)
