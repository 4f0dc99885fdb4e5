"""Helpers to publish realtime events to channel subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from anyio import from_thread
from fastapi.encoders import jsonable_encoder

from .manager import ChannelConnectionManager

logger = logging.getLogger(__name__)


class ChannelPublisher:
    """Serialize payloads and schedule their delivery on named channels.

    Publishing is fire-and-forget: callers have already committed their
    writes, so a failed delivery is logged and dropped. Clients recover by
    re-fetching from the API.
    """

    def __init__(self, manager: ChannelConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task[None]] = set()

    def publish(self, channel: str, event: str, payload: Any) -> None:
        """Schedule ``event`` with ``payload`` on ``channel``."""

        if not channel:
            return
        try:
            data = jsonable_encoder(payload)
        except (TypeError, ValueError):
            logger.warning("Could not serialize %s payload for %s", event, channel, exc_info=True)
            return
        self._schedule(channel, event, data)

    def publish_many(self, channels: Iterable[str], event: str, payload: Any) -> None:
        """Publish the same event on several channels, once per channel."""

        for channel in dict.fromkeys(channels):
            self.publish(channel, event, payload)

    def _schedule(self, channel: str, event: str, data: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(self._deliver, channel, event, data)
            except RuntimeError:
                logger.warning(
                    "No event loop available; dropped %s event on %s", event, channel
                )
        else:
            task = loop.create_task(self._deliver(channel, event, data))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _deliver(self, channel: str, event: str, data: Any) -> None:
        try:
            await self._manager.publish(channel, event, data)
        except Exception:
            logger.warning("Failed to publish %s on %s", event, channel, exc_info=True)


__all__ = ["ChannelPublisher"]
