"""Public helpers for user notifications."""

from .events import create_notification, notify_order_paid, serialize_notification
from .manage import (
    delete_all_notifications,
    delete_notification,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)

__all__ = [
    "create_notification",
    "notify_order_paid",
    "serialize_notification",
    "delete_all_notifications",
    "delete_notification",
    "list_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
]
