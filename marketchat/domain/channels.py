"""Realtime channel names and event names shared by publishers and clients."""

from __future__ import annotations

from typing import Final

EVENT_MESSAGE: Final[str] = "message"
EVENT_READ_RECEIPT: Final[str] = "read_receipt"
EVENT_NEW_MESSAGE: Final[str] = "new-message"
EVENT_UNREAD_UPDATE: Final[str] = "unread_update"
EVENT_NEW_NOTIFICATION: Final[str] = "new-notification"
EVENT_PRESENCE: Final[str] = "presence"

OP_PUBLISH: Final[str] = "publish"
OP_SUBSCRIBE: Final[str] = "subscribe"
OP_PRESENCE: Final[str] = "presence"


def conversation_channel(conversation_id: str) -> str:
    """Channel carrying messages and read receipts for one conversation."""

    return f"private:chat:{conversation_id}"


def inbox_channel(user_id: str) -> str:
    """Personal channel used to refresh inbox lists and notification badges."""

    return f"user:{user_id}"


def unread_channel(user_id: str) -> str:
    """Personal channel carrying unread-count cues."""

    return f"private:unread_count:{user_id}"


__all__ = [
    "EVENT_MESSAGE",
    "EVENT_READ_RECEIPT",
    "EVENT_NEW_MESSAGE",
    "EVENT_UNREAD_UPDATE",
    "EVENT_NEW_NOTIFICATION",
    "EVENT_PRESENCE",
    "OP_PUBLISH",
    "OP_SUBSCRIBE",
    "OP_PRESENCE",
    "conversation_channel",
    "inbox_channel",
    "unread_channel",
]
