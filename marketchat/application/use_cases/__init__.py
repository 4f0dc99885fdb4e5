"""Aggregate application use cases."""

from .chat import get_or_create_conversation, mark_messages_read, send_message
from .payments import reconcile_bkash_callback
from .realtime import issue_channel_token

__all__ = [
    "get_or_create_conversation",
    "issue_channel_token",
    "mark_messages_read",
    "reconcile_bkash_callback",
    "send_message",
]
