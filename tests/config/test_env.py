from __future__ import annotations

import pytest

from eddn_worker.config import ConfigurationError, env_flag, env_float, env_int


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("TRUE", True), (" True ", True), ("false", False), ("1", False)],
)
def test_env_flag_accepts_only_true(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", raw)

    assert env_flag("EXAMPLE_FLAG") is expected


def test_env_flag_defaults_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_FLAG", raising=False)

    assert env_flag("EXAMPLE_FLAG", default=True) is True


def test_env_int_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "three")

    with pytest.raises(ConfigurationError, match="integer"):
        env_int("EXAMPLE_INT", default=1)


def test_env_int_enforces_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "0")

    with pytest.raises(ConfigurationError, match="at least 1"):
        env_int("EXAMPLE_INT", default=1, minimum=1)


def test_env_float_parses_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLOAT", "2.5")

    assert env_float("EXAMPLE_FLOAT", default=1.0) == 2.5
