"""Domain entity describing a scoped realtime credential."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ChannelToken:
    """Signed, time-limited credential restricting channel operations."""

    token: str
    client_id: str
    capabilities: dict[str, list[str]] = field(default_factory=dict)
    ttl: int = 3600
    expires_at: datetime | None = None

    def allows(self, channel: str, operation: str) -> bool:
        """Return ``True`` when ``operation`` is granted on ``channel``."""

        return operation in self.capabilities.get(channel, ())

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


__all__ = ["ChannelToken"]
