"""Use cases for finding, creating and reading conversations."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from sqlalchemy.orm import Session

from marketchat.domain.entities import Conversation, ConversationSummary, Message, UserProfile
from marketchat.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    UnauthenticatedError,
)
from marketchat.infrastructure.repositories import (
    ConversationRepository,
    MessageRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


def get_or_create_conversation(
    session: Session, *, current_user_id: str | None, other_user_id: str | None
) -> tuple[Conversation, bool]:
    """Return the conversation between both users, creating it on first contact.

    The second element tells whether the conversation was created by this call.
    """

    if not current_user_id:
        raise UnauthenticatedError("Unauthorized")
    if not other_user_id or not isinstance(other_user_id, str):
        raise InvalidArgumentError("Invalid recipient")
    if other_user_id == current_user_id:
        raise InvalidArgumentError("Cannot create conversation with yourself")

    repository = ConversationRepository(session)
    existing = repository.find_between(current_user_id, other_user_id)
    if existing is not None:
        return existing, False

    if UserRepository(session).get(other_user_id) is None:
        raise NotFoundError("Recipient not found")

    try:
        return repository.create(current_user_id, other_user_id), True
    except ConflictError:
        # Another request won the race for this pair; return its row.
        winner = repository.find_between(current_user_id, other_user_id)
        if winner is None:
            raise
        logger.info(
            "Concurrent conversation creation for %s/%s resolved to %s",
            current_user_id,
            other_user_id,
            winner.id,
        )
        return winner, False


def get_conversation_for_participant(
    session: Session, *, conversation_id: str, user_id: str
) -> Conversation:
    """Return the conversation or raise when it is missing or not shared with ``user_id``."""

    if not conversation_id:
        raise InvalidArgumentError("conversation_id is required")
    conversation = ConversationRepository(session).get(conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")
    if not conversation.has_participant(user_id):
        raise ForbiddenError("Forbidden: You are not part of this conversation.")
    return conversation


def get_conversation_with_other_user(
    session: Session, *, conversation_id: str, user_id: str
) -> tuple[Conversation, UserProfile]:
    conversation = get_conversation_for_participant(
        session, conversation_id=conversation_id, user_id=user_id
    )
    other_id = conversation.other_participant(user_id)
    other = UserRepository(session).get(other_id)
    return conversation, other.profile() if other else UserProfile(id=other_id)


def list_conversations(session: Session, *, user_id: str) -> list[ConversationSummary]:
    """Return the user's inbox, most recently active first."""

    summaries = ConversationRepository(session).list_summaries_for_user(user_id)
    unread = MessageRepository(session).count_unread_by_conversation(user_id)
    for summary in summaries:
        summary.unread_count = unread.get(summary.conversation.id, 0)
    return summaries


def list_messages(
    session: Session, *, conversation_id: str, user_id: str, limit: int | None = None
) -> Sequence[Message]:
    """Return the conversation messages, newest first."""

    get_conversation_for_participant(
        session, conversation_id=conversation_id, user_id=user_id
    )
    return MessageRepository(session).list_for_conversation(
        conversation_id, newest_first=True, limit=limit
    )


__all__ = [
    "get_or_create_conversation",
    "get_conversation_for_participant",
    "get_conversation_with_other_user",
    "list_conversations",
    "list_messages",
]
