"""Integration tests for the chat endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from marketchat.domain.channels import conversation_channel, inbox_channel, unread_channel


def _open(client: TestClient, headers: dict[str, str], recipient_id: str):
    return client.post("/chat/conversations", json={"recipient_id": recipient_id}, headers=headers)


def test_requests_without_token_are_rejected(client: TestClient) -> None:
    response = client.get("/chat/conversations")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_unknown_user_in_token_is_rejected(client: TestClient, auth_headers) -> None:
    response = client.get("/chat/unread-count", headers=auth_headers("ghost"))
    assert response.status_code == 401


def test_conversation_is_unique_for_both_call_orders(
    client: TestClient, make_user, auth_headers
) -> None:
    make_user("alice")
    make_user("bob")

    first = _open(client, auth_headers("alice"), "bob")
    assert first.status_code == 201
    conversation = first.json()
    assert {conversation["user1_id"], conversation["user2_id"]} == {"alice", "bob"}

    again = _open(client, auth_headers("alice"), "bob")
    assert again.status_code == 200
    assert again.json()["id"] == conversation["id"]

    reverse = _open(client, auth_headers("bob"), "alice")
    assert reverse.status_code == 200
    assert reverse.json()["id"] == conversation["id"]

    listing = client.get("/chat/conversations", headers=auth_headers("bob"))
    assert [row["id"] for row in listing.json()] == [conversation["id"]]


def test_open_conversation_validates_recipient(
    client: TestClient, make_user, auth_headers
) -> None:
    make_user("alice")
    headers = auth_headers("alice")

    assert _open(client, headers, "alice").status_code == 400
    assert client.post("/chat/conversations", json={}, headers=headers).status_code == 400
    assert _open(client, headers, "nobody").status_code == 404


def test_outsider_cannot_read_send_or_get_token(
    client: TestClient, make_user, auth_headers, publisher
) -> None:
    for user_id in ("alice", "bob", "mallory"):
        make_user(user_id)
    conversation_id = _open(client, auth_headers("alice"), "bob").json()["id"]
    outsider = auth_headers("mallory")

    detail = client.get(f"/chat/conversations/{conversation_id}", headers=outsider)
    assert detail.status_code == 403

    messages = client.get(f"/chat/conversations/{conversation_id}/messages", headers=outsider)
    assert messages.status_code == 403

    send = client.post(
        "/chat/messages/send",
        json={"conversation_id": conversation_id, "content": "hi"},
        headers=outsider,
    )
    assert send.status_code == 403

    token = client.get(
        "/chat/token", params={"conversation_id": conversation_id}, headers=outsider
    )
    assert token.status_code == 403

    assert publisher.events == []


def test_missing_conversation_is_not_found(client: TestClient, make_user, auth_headers) -> None:
    make_user("alice")
    headers = auth_headers("alice")

    assert client.get("/chat/conversations/missing", headers=headers).status_code == 404
    response = client.post(
        "/chat/messages/send",
        json={"conversation_id": "missing", "content": "hi"},
        headers=headers,
    )
    assert response.status_code == 404


def test_send_message_validates_content(client: TestClient, make_user, auth_headers) -> None:
    make_user("alice")
    make_user("bob")
    headers = auth_headers("alice")
    conversation_id = _open(client, headers, "bob").json()["id"]

    for body in (
        {"conversation_id": conversation_id},
        {"conversation_id": conversation_id, "content": "   "},
        {"content": "hello"},
    ):
        assert client.post("/chat/messages/send", json=body, headers=headers).status_code == 400


def test_happy_path_chat(client: TestClient, make_user, auth_headers, publisher) -> None:
    make_user("alice", name="Alice")
    make_user("bob", name="Bob")
    alice, bob = auth_headers("alice"), auth_headers("bob")
    conversation_id = _open(client, alice, "bob").json()["id"]

    sent = client.post(
        "/chat/messages/send",
        json={"conversation_id": conversation_id, "content": "Is the tea in stock?"},
        headers=alice,
    )
    assert sent.status_code == 200
    message = sent.json()
    assert message["sender_id"] == "alice"
    assert message["sender"]["name"] == "Alice"
    assert message["read_by"] == []

    live = publisher.on(conversation_channel(conversation_id), "message")
    assert [payload["id"] for payload in live] == [message["id"]]
    assert publisher.on(unread_channel("bob"), "unread_update") == [{"user_id": "bob"}]
    for user_id in ("alice", "bob"):
        inbox = publisher.on(inbox_channel(user_id), "new-message")
        assert inbox[-1]["last_message"]["id"] == message["id"]

    assert client.get("/chat/unread-count", headers=bob).json() == {"unread_count": 1}
    assert client.get("/chat/unread-count", headers=alice).json() == {"unread_count": 0}

    listing = client.get("/chat/conversations", headers=bob).json()
    assert listing[0]["last_message"]["content"] == "Is the tea in stock?"
    assert listing[0]["unread_count"] == 1

    marked = client.post(
        "/chat/messages/mark-read",
        json={"conversation_id": conversation_id, "message_ids": [message["id"]]},
        headers=bob,
    )
    assert marked.json() == {"success": True, "marked": 1}

    receipts = publisher.on(conversation_channel(conversation_id), "read_receipt")
    assert receipts == [
        {
            "reader_id": "bob",
            "message_ids": [message["id"]],
            "conversation_id": conversation_id,
        }
    ]
    assert client.get("/chat/unread-count", headers=bob).json() == {"unread_count": 0}

    history = client.get(f"/chat/conversations/{conversation_id}/messages", headers=alice)
    assert history.json()[0]["read_by"] == ["bob"]

    detail = client.get(f"/chat/conversations/{conversation_id}", headers=alice).json()
    assert detail["other_user"]["id"] == "bob"


def test_messages_are_listed_newest_first(client: TestClient, make_user, auth_headers) -> None:
    make_user("alice")
    make_user("bob")
    alice, bob = auth_headers("alice"), auth_headers("bob")
    conversation_id = _open(client, alice, "bob").json()["id"]

    for content, headers in (("one", alice), ("two", bob), ("three", alice)):
        client.post(
            "/chat/messages/send",
            json={"conversation_id": conversation_id, "content": content},
            headers=headers,
        )

    history = client.get(f"/chat/conversations/{conversation_id}/messages", headers=bob).json()
    assert [message["content"] for message in history] == ["three", "two", "one"]

    limited = client.get(
        f"/chat/conversations/{conversation_id}/messages",
        params={"limit": 1},
        headers=bob,
    ).json()
    assert [message["content"] for message in limited] == ["three"]


def test_conversation_list_orders_by_latest_activity(
    client: TestClient, make_user, auth_headers
) -> None:
    for user_id in ("alice", "bob", "carol"):
        make_user(user_id)
    alice = auth_headers("alice")
    with_bob = _open(client, alice, "bob").json()["id"]
    with_carol = _open(client, alice, "carol").json()["id"]

    client.post(
        "/chat/messages/send",
        json={"conversation_id": with_carol, "content": "first"},
        headers=alice,
    )
    client.post(
        "/chat/messages/send",
        json={"conversation_id": with_bob, "content": "second"},
        headers=alice,
    )

    listing = client.get("/chat/conversations", headers=alice).json()
    assert [row["id"] for row in listing] == [with_bob, with_carol]
