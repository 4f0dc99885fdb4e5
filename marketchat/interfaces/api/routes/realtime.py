"""Websocket endpoint for channel subscriptions, publishing and presence."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from marketchat.domain.channels import OP_PRESENCE, OP_PUBLISH, OP_SUBSCRIBE
from marketchat.domain.entities import ChannelToken
from marketchat.infrastructure.realtime import ChannelConnectionManager
from marketchat.infrastructure.security import decode_channel_token
from marketchat.utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["realtime"])

_PRESENCE_ACTIONS = {"enter", "leave", "update"}


def _required_operation(message_type: str) -> str | None:
    if message_type in ("subscribe", "unsubscribe"):
        return OP_SUBSCRIBE
    if message_type == "publish":
        return OP_PUBLISH
    if message_type in ("presence", "presence.get"):
        return OP_PRESENCE
    return None


async def _send_error(websocket: WebSocket, detail: str) -> None:
    await websocket.send_json({"type": "error", "detail": detail})


async def _handle_frame(
    manager: ChannelConnectionManager,
    websocket: WebSocket,
    grant: ChannelToken,
    message: dict[str, Any],
) -> None:
    message_type = message.get("type")
    if message_type == "ping":
        manager.touch(websocket)
        await websocket.send_json({"type": "pong"})
        return

    operation = _required_operation(message_type) if isinstance(message_type, str) else None
    if operation is None:
        await _send_error(websocket, "Unknown message type")
        return

    channel = message.get("channel")
    if not isinstance(channel, str) or not channel:
        await _send_error(websocket, "channel is required")
        return
    if not grant.allows(channel, operation):
        await _send_error(websocket, f"Not allowed to {operation} on {channel}")
        return

    if message_type == "subscribe":
        manager.subscribe(channel, websocket)
    elif message_type == "unsubscribe":
        manager.unsubscribe(channel, websocket)
    elif message_type == "publish":
        event = message.get("event")
        if not isinstance(event, str) or not event:
            await _send_error(websocket, "event is required")
            return
        await manager.publish(channel, event, message.get("data"))
    elif message_type == "presence.get":
        await websocket.send_json(
            {
                "type": "presence.members",
                "channel": channel,
                "members": manager.presence_members(channel),
            }
        )
    else:
        action = message.get("action")
        data = message.get("data")
        if action not in _PRESENCE_ACTIONS:
            await _send_error(websocket, "action must be enter, leave or update")
            return
        if data is not None and not isinstance(data, dict):
            await _send_error(websocket, "presence data must be an object")
            return
        if action == "enter":
            await manager.enter_presence(channel, websocket, data)
        elif action == "update":
            await manager.update_presence(channel, websocket, data)
        else:
            await manager.leave_presence(channel, websocket)


def _expiry(payload: dict[str, Any]) -> datetime | None:
    exp = payload.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


@router.websocket("/ws")
async def realtime_websocket(websocket: WebSocket) -> None:
    """Serve one realtime client authenticated by a channel token."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return
    try:
        payload = decode_channel_token(token)
    except ValueError:
        await websocket.close(code=1008)
        return

    grant = ChannelToken(
        token=token,
        client_id=payload["sub"],
        capabilities=payload["cap"],
        expires_at=_expiry(payload),
    )
    manager: ChannelConnectionManager = websocket.app.state.channel_manager

    await manager.connect(grant.client_id, websocket)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                await _send_error(websocket, "Frames must be JSON objects")
                continue

            if not isinstance(message, dict):
                await _send_error(websocket, "Frames must be JSON objects")
                continue
            if grant.is_expired(utcnow()):
                await _send_error(websocket, "token expired")
                await websocket.close(code=1008)
                return
            logger.debug("Frame from %s: %s", grant.client_id, message.get("type"))
            await _handle_frame(manager, websocket, grant, message)
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)
