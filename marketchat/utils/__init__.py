"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_utc,
    get_app_timezone,
    isoformat_or_none,
    now_in_app_timezone,
    to_naive_utc,
    utcnow,
    utcnow_naive,
)

__all__ = [
    "ensure_utc",
    "get_app_timezone",
    "isoformat_or_none",
    "now_in_app_timezone",
    "to_naive_utc",
    "utcnow",
    "utcnow_naive",
]
