"""Clocks, trailing windows, and deadlines used by reconciliation."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from eddn_worker.domain.errors import ReconciliationTimeout


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("Timestamps must include timezone information")
    return value.astimezone(UTC)


def trailing_window_start(now: datetime, lookback: timedelta) -> datetime:
    """Return the inclusive lower bound of the ``lookback`` window ending at ``now``."""

    if lookback < timedelta(0):
        raise ValueError("Lookback duration must be non-negative")
    return ensure_aware(now) - lookback


@dataclass(slots=True)
class Deadline:
    """Monotonic time budget for one unit of work."""

    seconds: float
    _expires_at: float = field(init=False)

    def __post_init__(self) -> None:
        self._expires_at = time.monotonic() + self.seconds

    @property
    def remaining(self) -> float:
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self._expires_at

    def check(self, step: str) -> None:
        if self.expired:
            raise ReconciliationTimeout(f"Timed out after {self.seconds:g}s during {step}")


__all__ = [
    "Clock",
    "Deadline",
    "ensure_aware",
    "trailing_window_start",
    "utcnow",
]
