"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

NOTIFICATION_TYPE_INFO = "INFO"
NOTIFICATION_TYPE_SUCCESS = "SUCCESS"
NOTIFICATION_TYPE_WARNING = "WARNING"
NOTIFICATION_TYPE_ERROR = "ERROR"


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: str | None
    recipient_id: str
    type: str
    title: str
    message: str
    action_url: str | None = None
    is_read: bool = False
    created_at: datetime | None = None


__all__ = [
    "NOTIFICATION_TYPE_INFO",
    "NOTIFICATION_TYPE_SUCCESS",
    "NOTIFICATION_TYPE_WARNING",
    "NOTIFICATION_TYPE_ERROR",
    "Notification",
]
