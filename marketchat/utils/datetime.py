"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from marketchat.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "Asia/Dhaka"


def utcnow() -> datetime:
    """Return the current UTC time as an aware datetime."""

    return datetime.now(tz=timezone.utc)


def utcnow_naive() -> datetime:
    """Return the current UTC time without ``tzinfo`` for storage columns.

    SQLite and several other backends drop the offset of ``DATETIME`` values,
    so every timestamp is persisted as naive UTC and re-attached on read.
    """

    return utcnow().replace(tzinfo=None)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values read back from the database."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` converted to UTC with ``tzinfo`` removed."""

    normalized = ensure_utc(value)
    if normalized is None:
        return None
    return normalized.replace(tzinfo=None)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the configured application timezone, defaulting to Dhaka."""

    name = (get_settings().app_timezone or "").strip() or _DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        return ZoneInfo(_DEFAULT_TIMEZONE)


def now_in_app_timezone() -> datetime:
    """Return the current time localized to the configured timezone."""

    return datetime.now(tz=get_app_timezone())


def isoformat_or_none(value: datetime | None) -> str | None:
    normalized = ensure_utc(value)
    return normalized.isoformat() if normalized else None
