"""Use cases for realtime channel access."""

from .issue_channel_token import issue_channel_token

__all__ = ["issue_channel_token"]
