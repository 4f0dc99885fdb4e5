"""Realtime channel transport for the infrastructure layer."""

from .manager import ChannelConnectionManager
from .publisher import ChannelPublisher

__all__ = ["ChannelConnectionManager", "ChannelPublisher"]
