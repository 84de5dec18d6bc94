from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_iso_nano(value: datetime) -> str:
    """Extended ISO-8601 in UTC with nine fractional digits, e.g. ``2026-01-02T03:04:05.123456000Z``."""

    return as_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%f") + "000Z"
