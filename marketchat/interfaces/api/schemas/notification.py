"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    recipient_id: str
    type: str
    title: str
    message: str
    action_url: str | None = None
    is_read: bool = False
    created_at: datetime | None = None


class SuccessResponse(BaseModel):
    success: bool = True
    count: int | None = None


__all__ = ["NotificationRead", "SuccessResponse"]
