"""Helpers to persist notifications and push them to the recipient's inbox channel."""

from __future__ import annotations

from sqlalchemy.orm import Session

from marketchat.domain.channels import EVENT_NEW_NOTIFICATION, inbox_channel
from marketchat.domain.entities import (
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_SUCCESS,
    Notification,
    Order,
)
from marketchat.infrastructure.realtime import ChannelPublisher
from marketchat.infrastructure.repositories import NotificationRepository
from marketchat.utils import isoformat_or_none, utcnow


def serialize_notification(notification: Notification) -> dict[str, object]:
    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "action_url": notification.action_url,
        "is_read": notification.is_read,
        "created_at": isoformat_or_none(notification.created_at),
    }


def create_notification(
    session: Session,
    publisher: ChannelPublisher,
    *,
    recipient_id: str,
    title: str,
    message: str,
    type: str = NOTIFICATION_TYPE_INFO,
    action_url: str | None = None,
) -> Notification:
    """Persist a notification and publish ``new-notification`` to its recipient."""

    saved = NotificationRepository(session).create(
        Notification(
            id=None,
            recipient_id=recipient_id,
            type=type,
            title=title,
            message=message,
            action_url=action_url,
            created_at=utcnow(),
        )
    )
    publisher.publish(
        inbox_channel(recipient_id), EVENT_NEW_NOTIFICATION, serialize_notification(saved)
    )
    return saved


def notify_order_paid(
    session: Session,
    publisher: ChannelPublisher,
    *,
    order: Order,
    shop_owner_ids: list[str],
) -> None:
    """Tell the buyer and every vendor in the order that payment went through."""

    create_notification(
        session,
        publisher,
        recipient_id=order.user_id,
        type=NOTIFICATION_TYPE_SUCCESS,
        title="Payment successful",
        message=f"Your payment for order {order.order_number} was received.",
        action_url=f"/dashboard/order/order-confirmation?orderId={order.order_number}",
    )
    for owner_id in dict.fromkeys(shop_owner_ids):
        if owner_id == order.user_id:
            continue
        create_notification(
            session,
            publisher,
            recipient_id=owner_id,
            type=NOTIFICATION_TYPE_INFO,
            title="New Order",
            message=f"You have a new order! Order ID: {order.order_number}",
            action_url=f"/dashboard/vendor/orders?orderId={order.order_number}",
        )


__all__ = ["create_notification", "notify_order_paid", "serialize_notification"]
