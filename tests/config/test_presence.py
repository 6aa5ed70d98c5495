from __future__ import annotations

import pytest

from rollcall.config import (
    DEFAULT_MIN_MINUTES,
    DEFAULT_MIN_PERCENT,
    ConfigurationError,
    get_presence_defaults,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ROLLCALL_MIN_MINUTES", "ROLLCALL_MIN_PERCENT", "ROLLCALL_EXCLUDE_NAMES"):
        monkeypatch.delenv(name, raising=False)


def test_presence_defaults_without_env() -> None:
    defaults = get_presence_defaults()

    assert defaults.min_minutes == DEFAULT_MIN_MINUTES == 60
    assert defaults.min_percent == DEFAULT_MIN_PERCENT == 90
    assert defaults.excluded_names == ()


def test_presence_defaults_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROLLCALL_MIN_MINUTES", "45")
    monkeypatch.setenv("ROLLCALL_MIN_PERCENT", "75")
    monkeypatch.setenv("ROLLCALL_EXCLUDE_NAMES", "Host,Notetaker")

    defaults = get_presence_defaults()

    assert defaults.min_minutes == 45
    assert defaults.min_percent == 75
    assert defaults.excluded_names == ("Host", "Notetaker")


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("ROLLCALL_MIN_MINUTES", "-1"),
        ("ROLLCALL_MIN_PERCENT", "101"),
        ("ROLLCALL_MIN_PERCENT", "ninety"),
    ],
)
def test_presence_defaults_reject_invalid_values(
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    value: str,
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_presence_defaults()
