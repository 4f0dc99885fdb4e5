"""Endpoints for reading and clearing user notifications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketchat.application.use_cases.notifications import (
    delete_all_notifications,
    delete_notification as delete_notification_uc,
    list_notifications as list_notifications_uc,
    mark_all_notifications_read,
    mark_notification_read,
)
from marketchat.application.use_cases.realtime import issue_channel_token
from marketchat.domain.entities import Notification, User
from marketchat.domain.errors import MarketChatError
from marketchat.infrastructure.database import get_db
from marketchat.interfaces.api.dependencies import get_current_user
from marketchat.interfaces.api.routes_helpers import to_http_exception
from marketchat.interfaces.api.schemas import (
    ChannelTokenRead,
    NotificationRead,
    SuccessResponse,
)

from .chat import token_to_schema

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        recipient_id=notification.recipient_id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        action_url=notification.action_url,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


@router.get("/token", response_model=ChannelTokenRead)
def notifications_token(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ChannelTokenRead:
    """Issue a token for the user's personal inbox and unread channels."""

    return token_to_schema(issue_channel_token(db, user=current_user))


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[NotificationRead]:
    """Return the most recent notifications for the authenticated user."""

    notifications = list_notifications_uc(db, user_id=current_user.id, limit=limit)
    return [_notification_to_schema(notification) for notification in notifications]


@router.patch("/read-all", response_model=SuccessResponse)
def read_all_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    updated = mark_all_notifications_read(db, user_id=current_user.id)
    return SuccessResponse(success=True, count=updated)


@router.patch("/{notification_id}", response_model=NotificationRead)
def read_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationRead:
    try:
        notification = mark_notification_read(
            db, user_id=current_user.id, notification_id=notification_id
        )
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc
    return _notification_to_schema(notification)


@router.delete("", response_model=SuccessResponse)
def clear_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    deleted = delete_all_notifications(db, user_id=current_user.id)
    return SuccessResponse(success=True, count=deleted)


@router.delete("/{notification_id}", response_model=SuccessResponse)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    try:
        delete_notification_uc(db, user_id=current_user.id, notification_id=notification_id)
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc
    return SuccessResponse(success=True)
