"""Pydantic models describing chat payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class UserProfileRead(BaseModel):
    id: str
    name: str | None = None
    username: str | None = None
    image: str | None = None


class ConversationCreate(BaseModel):
    """Payload used to open a conversation with another user."""

    recipient_id: Any = Field(default=None, description="User to talk to")


class ConversationRead(BaseModel):
    id: str
    user1_id: str
    user2_id: str
    last_message_at: datetime | None = None
    created_at: datetime | None = None


class ConversationDetail(ConversationRead):
    other_user: UserProfileRead


class MessagePreviewRead(BaseModel):
    id: str
    sender_id: str
    content: str
    created_at: datetime | None = None


class ConversationSummaryRead(ConversationRead):
    """Inbox row: the conversation, both participants and the latest message."""

    user1: UserProfileRead | None = None
    user2: UserProfileRead | None = None
    last_message: MessagePreviewRead | None = None
    unread_count: int = 0


class MessageRead(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime | None = None
    read_by: list[str] = Field(default_factory=list)
    sender: UserProfileRead | None = None


class MessageSendRequest(BaseModel):
    """Payload used to send a message into a conversation."""

    conversation_id: str | None = None
    content: Any = None


class MarkReadRequest(BaseModel):
    """Payload used to record read receipts for a batch of messages."""

    conversation_id: str | None = None
    message_ids: Any = None


class MarkReadResponse(BaseModel):
    success: bool = True
    marked: int = 0


class UnreadCountResponse(BaseModel):
    unread_count: int


__all__ = [
    "ConversationCreate",
    "ConversationDetail",
    "ConversationRead",
    "ConversationSummaryRead",
    "MarkReadRequest",
    "MarkReadResponse",
    "MessagePreviewRead",
    "MessageRead",
    "MessageSendRequest",
    "UnreadCountResponse",
    "UserProfileRead",
]
