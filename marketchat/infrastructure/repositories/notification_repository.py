"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from marketchat.domain.entities import Notification
from marketchat.infrastructure.models import NotificationModel
from marketchat.utils import ensure_utc, to_naive_utc, utcnow_naive


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(
        self,
        recipient_id: str,
        *,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_unread(self, recipient_id: str) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.is_read.is_(False))
            .count()
        )

    def create(self, notification: Notification, *, commit: bool = True) -> Notification:
        model = NotificationModel(
            recipient_id=notification.recipient_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            action_url=notification.action_url,
            is_read=notification.is_read,
            created_at=to_naive_utc(notification.created_at) or utcnow_naive(),
        )
        self.session.add(model)
        if commit:
            self.session.commit()
            self.session.refresh(model)
        else:
            self.session.flush()
        return self._to_entity(model)

    def mark_as_read(self, notification_id: str, *, recipient_id: str) -> Notification | None:
        model = self._get_owned(notification_id, recipient_id)
        if model is None:
            return None
        if not model.is_read:
            model.is_read = True
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_as_read(self, *, recipient_id: str) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.recipient_id == recipient_id,
                NotificationModel.is_read.is_(False),
            )
            .update({NotificationModel.is_read: True}, synchronize_session=False)
        )
        self.session.commit()
        return int(updated or 0)

    def delete(self, notification_id: str, *, recipient_id: str) -> bool:
        model = self._get_owned(notification_id, recipient_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    def delete_all(self, *, recipient_id: str) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return int(deleted or 0)

    def _get_owned(self, notification_id: str, recipient_id: str) -> NotificationModel | None:
        return (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.recipient_id == recipient_id,
            )
            .first()
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            type=model.type,
            title=model.title,
            message=model.message,
            action_url=model.action_url,
            is_read=bool(model.is_read),
            created_at=ensure_utc(model.created_at),
        )


__all__ = ["NotificationRepository"]
