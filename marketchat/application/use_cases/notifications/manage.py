"""Use cases for reading and clearing a user's notifications."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from marketchat.domain.entities import Notification
from marketchat.domain.errors import NotFoundError
from marketchat.infrastructure.repositories import NotificationRepository


def list_notifications(
    session: Session, *, user_id: str, limit: int | None = 50
) -> Sequence[Notification]:
    """Return the user's notifications, newest first."""

    return NotificationRepository(session).list_for_user(user_id, limit=limit)


def mark_notification_read(
    session: Session, *, user_id: str, notification_id: str
) -> Notification:
    notification = NotificationRepository(session).mark_as_read(
        notification_id, recipient_id=user_id
    )
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


def mark_all_notifications_read(session: Session, *, user_id: str) -> int:
    return NotificationRepository(session).mark_all_as_read(recipient_id=user_id)


def delete_notification(session: Session, *, user_id: str, notification_id: str) -> None:
    if not NotificationRepository(session).delete(notification_id, recipient_id=user_id):
        raise NotFoundError("Notification not found")


def delete_all_notifications(session: Session, *, user_id: str) -> int:
    return NotificationRepository(session).delete_all(recipient_id=user_id)


__all__ = [
    "delete_all_notifications",
    "delete_notification",
    "list_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
]
