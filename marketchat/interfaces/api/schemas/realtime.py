"""Pydantic models describing realtime credentials."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ChannelTokenRead(BaseModel):
    """Scoped credential for the realtime websocket."""

    token: str
    client_id: str
    capabilities: dict[str, list[str]] = Field(
        default_factory=dict, description="Operations granted per channel"
    )
    ttl: int = Field(description="Lifetime of the token in seconds")
    expires_at: datetime | None = None


__all__ = ["ChannelTokenRead"]
