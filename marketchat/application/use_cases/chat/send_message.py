"""Use case for sending a chat message and fanning it out."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from marketchat.domain.channels import (
    EVENT_MESSAGE,
    EVENT_NEW_MESSAGE,
    EVENT_UNREAD_UPDATE,
    conversation_channel,
    inbox_channel,
    unread_channel,
)
from marketchat.domain.entities import Message
from marketchat.domain.errors import InvalidArgumentError
from marketchat.infrastructure.realtime import ChannelPublisher
from marketchat.infrastructure.repositories import (
    ConversationRepository,
    MessageRepository,
)

from .conversations import get_conversation_for_participant
from .payloads import serialize_message, serialize_summary

logger = logging.getLogger(__name__)


def send_message(
    session: Session,
    publisher: ChannelPublisher,
    *,
    sender_id: str,
    conversation_id: str,
    content: object,
) -> Message:
    """Persist ``content`` as a new message and publish it.

    The message row and the conversation's ``last_message_at`` are committed
    together before anything is published. Publishing is best-effort.
    """

    if not isinstance(content, str) or not content.strip():
        raise InvalidArgumentError("Message content is required.")

    conversation = get_conversation_for_participant(
        session, conversation_id=conversation_id, user_id=sender_id
    )
    message = MessageRepository(session).create(
        conversation_id=conversation.id, sender_id=sender_id, content=content
    )
    recipient_id = conversation.other_participant(sender_id)

    publisher.publish(
        conversation_channel(conversation.id), EVENT_MESSAGE, serialize_message(message)
    )
    publisher.publish(
        unread_channel(recipient_id), EVENT_UNREAD_UPDATE, {"user_id": recipient_id}
    )

    summary = ConversationRepository(session).get_summary(conversation.id)
    if summary is not None:
        publisher.publish_many(
            [inbox_channel(recipient_id), inbox_channel(sender_id)],
            EVENT_NEW_MESSAGE,
            serialize_summary(summary),
        )

    logger.debug("Message %s sent in conversation %s", message.id, conversation.id)
    return message


__all__ = ["send_message"]
