"""Domain entities describing conversations and their messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .user import UserProfile


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Return the pair ordered so that the smaller identifier comes first."""

    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


@dataclass
class Conversation:
    """Durable one-to-one channel between two users."""

    id: str
    user1_id: str
    user2_id: str
    last_message_at: datetime | None = None
    created_at: datetime | None = None

    def has_participant(self, user_id: str | None) -> bool:
        return bool(user_id) and user_id in (self.user1_id, self.user2_id)

    def other_participant(self, user_id: str) -> str:
        """Return the identifier of the participant that is not ``user_id``."""

        if user_id == self.user1_id:
            return self.user2_id
        if user_id == self.user2_id:
            return self.user1_id
        raise ValueError(f"User {user_id} is not part of conversation {self.id}")


@dataclass
class Message:
    """A chat message. ``read_by`` only ever grows."""

    id: str
    conversation_id: str
    sender_id: str
    content: str
    created_at: datetime | None = None
    read_by: list[str] = field(default_factory=list)
    sender: UserProfile | None = None

    def is_read_by(self, user_id: str) -> bool:
        # Senders have implicitly read their own messages.
        return user_id == self.sender_id or user_id in self.read_by


@dataclass
class MessagePreview:
    id: str
    sender_id: str
    content: str
    created_at: datetime | None = None


@dataclass
class ConversationSummary:
    """Conversation joined with both profiles and the latest message."""

    conversation: Conversation
    user1: UserProfile
    user2: UserProfile
    last_message: MessagePreview | None = None
    unread_count: int = 0


__all__ = [
    "canonical_pair",
    "Conversation",
    "ConversationSummary",
    "Message",
    "MessagePreview",
]
