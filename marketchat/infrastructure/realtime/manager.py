"""Connection management for realtime channel websockets."""

from __future__ import annotations

from collections import defaultdict
import logging
import time
from typing import Any, Callable, DefaultDict, Set

from fastapi import WebSocket

from marketchat.domain.channels import EVENT_PRESENCE
from marketchat.domain.presence import PresenceSet

logger = logging.getLogger(__name__)


class ChannelConnectionManager:
    """Track websocket subscriptions and presence grouped by channel."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._subscribers: DefaultDict[str, Set[WebSocket]] = defaultdict(set)
        self._presence: DefaultDict[str, PresenceSet] = defaultdict(lambda: PresenceSet(clock))
        # Sockets backing each (channel, client) presence entry; a client with
        # two tabs stays present until the last one leaves.
        self._presence_sockets: DefaultDict[tuple[str, str], Set[WebSocket]] = defaultdict(set)
        self._clients: dict[WebSocket, str] = {}

    async def connect(self, client_id: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``client_id``."""

        await websocket.accept()
        self._clients[websocket] = client_id

    def subscribe(self, channel: str, websocket: WebSocket) -> None:
        self._subscribers[channel].add(websocket)

    def unsubscribe(self, channel: str, websocket: WebSocket) -> None:
        subscribers = self._subscribers.get(channel)
        if subscribers is None:
            return
        subscribers.discard(websocket)
        if not subscribers:
            self._subscribers.pop(channel, None)

    def is_subscribed(self, channel: str, websocket: WebSocket) -> bool:
        return websocket in self._subscribers.get(channel, ())

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, ()))

    async def disconnect(self, websocket: WebSocket) -> None:
        """Forget ``websocket`` and announce departures it leaves behind."""

        client_id = self._clients.pop(websocket, None)
        for channel in [c for c, sockets in self._subscribers.items() if websocket in sockets]:
            self.unsubscribe(channel, websocket)
        if client_id is None:
            return
        for channel, owner in list(self._presence_sockets):
            if owner != client_id:
                continue
            try:
                await self._leave(channel, client_id, websocket)
            except Exception:  # pragma: no cover - soft signal only
                logger.warning(
                    "Failed to clear presence of %s on %s", client_id, channel, exc_info=True
                )

    async def publish(
        self,
        channel: str,
        event: str,
        data: Any,
        *,
        exclude: WebSocket | None = None,
    ) -> int:
        """Send ``event`` to every subscriber of ``channel``. Returns deliveries."""

        message = {"channel": channel, "event": event, "data": data}
        delivered = 0
        for connection in list(self._subscribers.get(channel, set())):
            if connection is exclude:
                continue
            try:
                await connection.send_json(message)
            except Exception:
                logger.debug("Dropping unreachable subscriber on %s", channel)
                self.unsubscribe(channel, connection)
                continue
            delivered += 1
        return delivered

    async def enter_presence(
        self, channel: str, websocket: WebSocket, data: dict[str, Any] | None = None
    ) -> None:
        client_id = self._clients[websocket]
        self._presence_sockets[(channel, client_id)].add(websocket)
        if self._presence[channel].enter(client_id, data):
            await self._broadcast_presence(channel, "enter", client_id, data)

    async def update_presence(
        self, channel: str, websocket: WebSocket, data: dict[str, Any] | None = None
    ) -> None:
        client_id = self._clients[websocket]
        if self._presence[channel].update(client_id, data):
            await self._broadcast_presence(channel, "update", client_id, data)

    async def leave_presence(self, channel: str, websocket: WebSocket) -> None:
        client_id = self._clients.get(websocket)
        if client_id is not None:
            await self._leave(channel, client_id, websocket)

    async def _leave(self, channel: str, client_id: str, websocket: WebSocket) -> None:
        key = (channel, client_id)
        sockets = self._presence_sockets.get(key)
        if sockets is not None:
            sockets.discard(websocket)
            if sockets:
                return
            self._presence_sockets.pop(key, None)
        if self._presence[channel].leave(client_id):
            await self._broadcast_presence(channel, "leave", client_id, None)
        if not self._presence[channel]:
            self._presence.pop(channel, None)

    def touch(self, websocket: WebSocket) -> None:
        """Refresh the heartbeat of every presence entry backed by ``websocket``."""

        client_id = self._clients.get(websocket)
        if client_id is None:
            return
        for (channel, owner), sockets in self._presence_sockets.items():
            if owner == client_id and websocket in sockets:
                self._presence[channel].touch(client_id)

    async def evict_stale_presence(self, max_idle: float) -> dict[str, list[str]]:
        """Drop presence entries whose heartbeat is older than ``max_idle`` seconds."""

        evicted: dict[str, list[str]] = {}
        for channel, presence in list(self._presence.items()):
            stale = presence.evict_stale(max_idle)
            for client_id in stale:
                self._presence_sockets.pop((channel, client_id), None)
                await self._broadcast_presence(channel, "leave", client_id, None)
            if stale:
                evicted[channel] = stale
            if not presence:
                self._presence.pop(channel, None)
        return evicted

    def presence_members(self, channel: str) -> list[dict[str, Any]]:
        presence = self._presence.get(channel)
        if presence is None:
            return []
        return [member.as_payload() for member in presence.members()]

    async def _broadcast_presence(
        self, channel: str, action: str, client_id: str, data: dict[str, Any] | None
    ) -> None:
        await self.publish(
            channel,
            EVENT_PRESENCE,
            {"action": action, "client_id": client_id, "data": dict(data or {})},
        )


__all__ = ["ChannelConnectionManager"]
