"""Realtime payload builders for chat events."""

from __future__ import annotations

from marketchat.domain.entities import (
    ConversationSummary,
    Message,
    MessagePreview,
    UserProfile,
)
from marketchat.utils import isoformat_or_none


def serialize_profile(profile: UserProfile | None) -> dict[str, object] | None:
    if profile is None:
        return None
    return {
        "id": profile.id,
        "name": profile.name,
        "username": profile.username,
        "image": profile.image,
    }


def serialize_message(message: Message) -> dict[str, object]:
    """Return the ``message`` event payload, sender profile included."""

    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "sender_id": message.sender_id,
        "content": message.content,
        "created_at": isoformat_or_none(message.created_at),
        "read_by": list(message.read_by),
        "sender": serialize_profile(message.sender),
    }


def _serialize_preview(preview: MessagePreview | None) -> dict[str, object] | None:
    if preview is None:
        return None
    return {
        "id": preview.id,
        "sender_id": preview.sender_id,
        "content": preview.content,
        "created_at": isoformat_or_none(preview.created_at),
    }


def serialize_summary(summary: ConversationSummary) -> dict[str, object]:
    """Return the ``new-message`` inbox payload."""

    conversation = summary.conversation
    return {
        "id": conversation.id,
        "user1_id": conversation.user1_id,
        "user2_id": conversation.user2_id,
        "last_message_at": isoformat_or_none(conversation.last_message_at),
        "created_at": isoformat_or_none(conversation.created_at),
        "user1": serialize_profile(summary.user1),
        "user2": serialize_profile(summary.user2),
        "last_message": _serialize_preview(summary.last_message),
    }


__all__ = ["serialize_message", "serialize_profile", "serialize_summary"]
