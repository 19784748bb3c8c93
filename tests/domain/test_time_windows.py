from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from eddn_worker.domain.errors import ReconciliationTimeout
from eddn_worker.domain.time_windows import Deadline, ensure_aware, trailing_window_start


def test_trailing_window_start_subtracts_lookback() -> None:
    now = datetime(2025, 1, 3, 12, tzinfo=UTC)

    assert trailing_window_start(now, timedelta(hours=48)) == datetime(2025, 1, 1, 12, tzinfo=UTC)


def test_trailing_window_start_normalises_to_utc() -> None:
    now = datetime(2025, 1, 3, 15, tzinfo=timezone(timedelta(hours=3)))

    start = trailing_window_start(now, timedelta(hours=1))

    assert start == datetime(2025, 1, 3, 11, tzinfo=UTC)
    assert start.tzinfo is UTC


def test_trailing_window_rejects_negative_lookback() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        trailing_window_start(datetime(2025, 1, 1, tzinfo=UTC), timedelta(hours=-1))


def test_ensure_aware_rejects_naive_datetimes() -> None:
    with pytest.raises(ValueError, match="timezone information"):
        ensure_aware(datetime(2025, 1, 1))  # noqa: DTZ001


def test_deadline_check_passes_within_budget() -> None:
    deadline = Deadline(60.0)

    deadline.check("lookup")

    assert not deadline.expired
    assert deadline.remaining > 0


def test_deadline_check_raises_when_expired() -> None:
    deadline = Deadline(0.0)

    with pytest.raises(ReconciliationTimeout, match="during commit"):
        deadline.check("commit")
