"""Use cases for read receipts and unread counts."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from marketchat.domain.channels import (
    EVENT_READ_RECEIPT,
    EVENT_UNREAD_UPDATE,
    conversation_channel,
    unread_channel,
)
from marketchat.domain.errors import InvalidArgumentError
from marketchat.infrastructure.realtime import ChannelPublisher
from marketchat.infrastructure.repositories import MessageRepository

from .conversations import get_conversation_for_participant


def _validate_message_ids(message_ids: object) -> list[str]:
    if not isinstance(message_ids, (list, tuple)) or not message_ids:
        raise InvalidArgumentError("message_ids must be a non-empty list")
    if not all(isinstance(message_id, str) and message_id for message_id in message_ids):
        raise InvalidArgumentError("message_ids must contain message identifiers")
    return list(dict.fromkeys(message_ids))


def mark_messages_read(
    session: Session,
    publisher: ChannelPublisher,
    *,
    reader_id: str,
    conversation_id: str,
    message_ids: Sequence[str],
) -> int:
    """Record ``reader_id`` as a reader of ``message_ids``.

    Messages sent by the reader, messages of other conversations and messages
    already read are skipped, which makes repeated calls no-ops. Returns the
    number of newly recorded reads.
    """

    ids = _validate_message_ids(message_ids)
    conversation = get_conversation_for_participant(
        session, conversation_id=conversation_id, user_id=reader_id
    )
    marked = MessageRepository(session).mark_read(
        ids, conversation_id=conversation.id, reader_id=reader_id
    )

    publisher.publish(
        conversation_channel(conversation.id),
        EVENT_READ_RECEIPT,
        {
            "reader_id": reader_id,
            "message_ids": ids,
            "conversation_id": conversation.id,
        },
    )
    publisher.publish(unread_channel(reader_id), EVENT_UNREAD_UPDATE, {"user_id": reader_id})
    return len(marked)


def get_unread_count(session: Session, *, user_id: str) -> int:
    """Count messages addressed to ``user_id`` that they have not read."""

    return MessageRepository(session).count_unread(user_id)


def get_unread_counts_by_conversation(session: Session, *, user_id: str) -> dict[str, int]:
    return MessageRepository(session).count_unread_by_conversation(user_id)


__all__ = [
    "get_unread_count",
    "get_unread_counts_by_conversation",
    "mark_messages_read",
]
