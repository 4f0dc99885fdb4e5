"""Use cases for buyer/vendor conversations."""

from .conversations import (
    get_conversation_for_participant,
    get_conversation_with_other_user,
    get_or_create_conversation,
    list_conversations,
    list_messages,
)
from .payloads import serialize_message, serialize_profile, serialize_summary
from .read_state import (
    get_unread_count,
    get_unread_counts_by_conversation,
    mark_messages_read,
)
from .send_message import send_message

__all__ = [
    "get_conversation_for_participant",
    "get_conversation_with_other_user",
    "get_or_create_conversation",
    "list_conversations",
    "list_messages",
    "serialize_message",
    "serialize_profile",
    "serialize_summary",
    "get_unread_count",
    "get_unread_counts_by_conversation",
    "mark_messages_read",
    "send_message",
]
