"""Tests for channel tokens and the realtime websocket."""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

import marketchat.interfaces.api.routes.realtime as realtime_routes
from marketchat.domain.entities import ChannelToken
from marketchat.infrastructure.security import (
    create_access_token,
    create_channel_token,
    decode_channel_token,
)
from marketchat.utils import utcnow


@pytest.fixture()
def conversation_id(client: TestClient, make_user, auth_headers) -> str:
    make_user("alice")
    make_user("bob")
    response = client.post(
        "/chat/conversations", json={"recipient_id": "bob"}, headers=auth_headers("alice")
    )
    return response.json()["id"]


def _chat_token(client: TestClient, headers: dict[str, str], conversation_id: str) -> str:
    response = client.get(
        "/chat/token", params={"conversation_id": conversation_id}, headers=headers
    )
    assert response.status_code == 200
    return response.json()["token"]


def test_chat_token_is_scoped_to_one_conversation(
    client: TestClient, conversation_id: str, auth_headers
) -> None:
    response = client.get(
        "/chat/token", params={"conversation_id": conversation_id}, headers=auth_headers("alice")
    )

    body = response.json()
    channel = f"private:chat:{conversation_id}"
    assert body["client_id"] == "alice"
    assert body["ttl"] == 3600
    assert body["capabilities"] == {channel: ["publish", "subscribe", "presence"]}

    claims = decode_channel_token(body["token"])
    grant = ChannelToken(token=body["token"], client_id=claims["sub"], capabilities=claims["cap"])
    assert grant.allows(channel, "publish")
    assert not grant.allows("private:chat:other", "subscribe")
    assert not grant.allows("user:alice", "subscribe")


def test_chat_token_requires_conversation_id(client: TestClient, make_user, auth_headers) -> None:
    make_user("alice")

    response = client.get("/chat/token", headers=auth_headers("alice"))

    assert response.status_code == 400


def test_notifications_token_grants_personal_channels(
    client: TestClient, make_user, auth_headers
) -> None:
    make_user("alice")

    body = client.get("/notifications/token", headers=auth_headers("alice")).json()

    assert body["capabilities"] == {
        "user:alice": ["subscribe"],
        "private:unread_count:alice": ["subscribe"],
    }


def test_access_token_is_not_a_channel_token() -> None:
    with pytest.raises(ValueError):
        decode_channel_token(create_access_token("alice"))


def test_websocket_rejects_invalid_token(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect("/realtime/ws?token=not-a-token"):
            pass
    assert excinfo.value.code == 1008


def test_websocket_publish_reaches_other_participant(
    client: TestClient, conversation_id: str, auth_headers
) -> None:
    channel = f"private:chat:{conversation_id}"
    alice_token = _chat_token(client, auth_headers("alice"), conversation_id)
    bob_token = _chat_token(client, auth_headers("bob"), conversation_id)

    with client.websocket_connect(f"/realtime/ws?token={bob_token}") as bob:
        bob.send_json({"type": "subscribe", "channel": channel})
        bob.send_json({"type": "ping"})
        assert bob.receive_json() == {"type": "pong"}

        with client.websocket_connect(f"/realtime/ws?token={alice_token}") as alice:
            alice.send_json(
                {"type": "publish", "channel": channel, "event": "typing", "data": {"on": True}}
            )
            assert bob.receive_json() == {
                "channel": channel,
                "event": "typing",
                "data": {"on": True},
            }


def test_websocket_refuses_channels_outside_the_grant(
    client: TestClient, conversation_id: str, auth_headers
) -> None:
    token = _chat_token(client, auth_headers("alice"), conversation_id)

    with client.websocket_connect(f"/realtime/ws?token={token}") as alice:
        alice.send_json({"type": "subscribe", "channel": "user:bob"})
        frame = alice.receive_json()
        assert frame["type"] == "error"

        alice.send_json({"type": "dance", "channel": "user:bob"})
        assert alice.receive_json()["type"] == "error"


def test_personal_token_cannot_publish(client: TestClient, make_user) -> None:
    make_user("alice")
    token, _ = create_channel_token("alice", {"user:alice": ["subscribe"]}, 60)

    with client.websocket_connect(f"/realtime/ws?token={token}") as alice:
        alice.send_json({"type": "publish", "channel": "user:alice", "event": "x", "data": {}})
        assert alice.receive_json()["type"] == "error"


def test_websocket_presence_enter_get_and_leave_on_disconnect(
    client: TestClient, conversation_id: str, auth_headers
) -> None:
    channel = f"private:chat:{conversation_id}"
    alice_token = _chat_token(client, auth_headers("alice"), conversation_id)
    bob_token = _chat_token(client, auth_headers("bob"), conversation_id)

    with client.websocket_connect(f"/realtime/ws?token={bob_token}") as bob:
        bob.send_json({"type": "subscribe", "channel": channel})
        bob.send_json({"type": "ping"})
        assert bob.receive_json() == {"type": "pong"}

        with client.websocket_connect(f"/realtime/ws?token={alice_token}") as alice:
            alice.send_json(
                {"type": "presence", "channel": channel, "action": "enter", "data": {"name": "A"}}
            )
            entered = bob.receive_json()
            assert entered["event"] == "presence"
            assert entered["data"] == {
                "action": "enter",
                "client_id": "alice",
                "data": {"name": "A"},
            }

            bob.send_json({"type": "presence.get", "channel": channel})
            assert bob.receive_json() == {
                "type": "presence.members",
                "channel": channel,
                "members": [{"client_id": "alice", "data": {"name": "A"}}],
            }

        left = bob.receive_json()
        assert left["data"]["action"] == "leave"
        assert left["data"]["client_id"] == "alice"


def test_websocket_closes_once_token_expires(
    client: TestClient, make_user, monkeypatch: pytest.MonkeyPatch
) -> None:
    make_user("alice")
    token, _ = create_channel_token("alice", {"user:alice": ["subscribe"]}, 60)

    with client.websocket_connect(f"/realtime/ws?token={token}") as alice:
        alice.send_json({"type": "ping"})
        assert alice.receive_json() == {"type": "pong"}

        later = utcnow() + timedelta(minutes=5)
        monkeypatch.setattr(realtime_routes, "utcnow", lambda: later)

        alice.send_json({"type": "subscribe", "channel": "user:alice"})
        assert alice.receive_json() == {"type": "error", "detail": "token expired"}
        with pytest.raises(WebSocketDisconnect) as excinfo:
            alice.receive_json()
        assert excinfo.value.code == 1008


def test_channel_token_expiry_is_inclusive() -> None:
    now = utcnow()
    grant = ChannelToken(token="t", client_id="alice", expires_at=now)

    assert grant.is_expired(now)
    assert not grant.is_expired(now - timedelta(seconds=1))
    assert not ChannelToken(token="t", client_id="alice").is_expired(now)
