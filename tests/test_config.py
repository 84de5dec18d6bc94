from __future__ import annotations

import pytest
from pydantic import ValidationError

from automessaging.core.config import Settings, parse_duration


def test_scheduler_interval_clamped_to_floor(monkeypatch):
    monkeypatch.setenv("SCHEDULER_INTERVAL", "30s")
    monkeypatch.setenv("SCHEDULER_FETCH_LIMIT", "2")
    monkeypatch.setenv("SERVER_SHUTDOWN_TIMEOUT", "10s")

    s = Settings()

    assert s.SCHEDULER_INTERVAL == 120
    assert s.SERVER_SHUTDOWN_TIMEOUT == 10


def test_scheduler_interval_above_floor_is_kept(monkeypatch):
    monkeypatch.setenv("SCHEDULER_INTERVAL", "5m")

    assert Settings().SCHEDULER_INTERVAL == 300


def test_fetch_limit_clamped_to_one(monkeypatch):
    monkeypatch.setenv("SCHEDULER_FETCH_LIMIT", "0")
    assert Settings().SCHEDULER_FETCH_LIMIT == 1

    monkeypatch.setenv("SCHEDULER_FETCH_LIMIT", "-5")
    assert Settings().SCHEDULER_FETCH_LIMIT == 1


def test_defaults(monkeypatch):
    for key in ("SCHEDULER_INTERVAL", "SCHEDULER_FETCH_LIMIT", "WEBHOOK_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)

    s = Settings()

    assert s.SCHEDULER_INTERVAL == 120
    assert s.SCHEDULER_FETCH_LIMIT == 2
    assert s.WEBHOOK_TIMEOUT == 15


def test_invalid_interval_is_rejected(monkeypatch):
    monkeypatch.setenv("SCHEDULER_INTERVAL", "two minutes")

    with pytest.raises(ValidationError):
        Settings()


@pytest.mark.parametrize(
    "raw,expected",
    [("30s", 30), ("2m", 120), ("1h30m", 5400), ("1.5m", 90), ("500ms", 0.5), ("45", 45), (" 10s ", 10), (7, 7)],
)
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", ["", "m", "2m30", "10x", "-5s"])
def test_parse_duration_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_duration(raw)
