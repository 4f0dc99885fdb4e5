"""Tests for read receipts and unread counting."""

from __future__ import annotations

import pytest

from marketchat.application.use_cases.chat import (
    get_or_create_conversation,
    get_unread_count,
    get_unread_counts_by_conversation,
    list_conversations,
    mark_messages_read,
    send_message,
)
from marketchat.domain.errors import ConflictError, ForbiddenError, InvalidArgumentError
from marketchat.infrastructure import database
from marketchat.infrastructure.models import ConversationModel, MessageReadModel
from marketchat.infrastructure.repositories import ConversationRepository, MessageRepository
from marketchat.utils import utcnow_naive


@pytest.fixture()
def conversation_id(db_session, make_user) -> str:
    make_user("alice")
    make_user("bob")
    conversation, created = get_or_create_conversation(
        db_session, current_user_id="alice", other_user_id="bob"
    )
    assert created is True
    return conversation.id


def _send(db_session, publisher, conversation_id: str, sender_id: str, content: str) -> str:
    return send_message(
        db_session,
        publisher,
        sender_id=sender_id,
        conversation_id=conversation_id,
        content=content,
    ).id


def test_marking_read_twice_changes_nothing(db_session, publisher, conversation_id) -> None:
    message_id = _send(db_session, publisher, conversation_id, "alice", "hello")

    first = mark_messages_read(
        db_session,
        publisher,
        reader_id="bob",
        conversation_id=conversation_id,
        message_ids=[message_id, message_id],
    )
    second = mark_messages_read(
        db_session,
        publisher,
        reader_id="bob",
        conversation_id=conversation_id,
        message_ids=[message_id],
    )

    assert first == 1
    assert second == 0
    assert get_unread_count(db_session, user_id="bob") == 0


def test_own_messages_are_never_marked(db_session, publisher, conversation_id) -> None:
    message_id = _send(db_session, publisher, conversation_id, "alice", "hello")

    marked = mark_messages_read(
        db_session,
        publisher,
        reader_id="alice",
        conversation_id=conversation_id,
        message_ids=[message_id],
    )

    assert marked == 0
    assert get_unread_count(db_session, user_id="bob") == 1


def test_unread_count_follows_mixed_sequence(db_session, publisher, conversation_id, make_user) -> None:
    make_user("carol")
    other, _ = get_or_create_conversation(
        db_session, current_user_id="carol", other_user_id="bob"
    )

    first = _send(db_session, publisher, conversation_id, "alice", "one")
    _send(db_session, publisher, conversation_id, "alice", "two")
    _send(db_session, publisher, conversation_id, "bob", "reply")
    _send(db_session, publisher, other.id, "carol", "hi bob")

    assert get_unread_count(db_session, user_id="bob") == 3
    assert get_unread_count(db_session, user_id="alice") == 1
    assert get_unread_counts_by_conversation(db_session, user_id="bob") == {
        conversation_id: 2,
        other.id: 1,
    }

    mark_messages_read(
        db_session,
        publisher,
        reader_id="bob",
        conversation_id=conversation_id,
        message_ids=[first],
    )
    assert get_unread_count(db_session, user_id="bob") == 2

    summaries = {
        summary.conversation.id: summary.unread_count
        for summary in list_conversations(db_session, user_id="bob")
    }
    assert summaries == {conversation_id: 1, other.id: 1}


def test_messages_of_other_conversations_are_ignored(
    db_session, publisher, conversation_id, make_user
) -> None:
    make_user("carol")
    other, _ = get_or_create_conversation(
        db_session, current_user_id="carol", other_user_id="bob"
    )
    foreign = _send(db_session, publisher, other.id, "carol", "hi bob")

    marked = mark_messages_read(
        db_session,
        publisher,
        reader_id="bob",
        conversation_id=conversation_id,
        message_ids=[foreign],
    )

    assert marked == 0
    assert get_unread_count(db_session, user_id="bob") == 1


@pytest.mark.parametrize("message_ids", [[], None, [""], "abc"])
def test_mark_read_rejects_malformed_ids(
    db_session, publisher, conversation_id, message_ids
) -> None:
    with pytest.raises(InvalidArgumentError):
        mark_messages_read(
            db_session,
            publisher,
            reader_id="bob",
            conversation_id=conversation_id,
            message_ids=message_ids,
        )


def test_mark_read_requires_participation(
    db_session, publisher, conversation_id, make_user
) -> None:
    make_user("mallory")
    message_id = _send(db_session, publisher, conversation_id, "alice", "hello")

    with pytest.raises(ForbiddenError):
        mark_messages_read(
            db_session,
            publisher,
            reader_id="mallory",
            conversation_id=conversation_id,
            message_ids=[message_id],
        )


def test_conversation_pair_is_stored_canonically(db_session, make_user) -> None:
    make_user("zed")
    make_user("amy")

    conversation, created = get_or_create_conversation(
        db_session, current_user_id="zed", other_user_id="amy"
    )
    again, created_again = get_or_create_conversation(
        db_session, current_user_id="amy", other_user_id="zed"
    )

    assert created is True
    assert created_again is False
    assert again.id == conversation.id
    assert (conversation.user1_id, conversation.user2_id) == ("amy", "zed")


def _record_receipt_elsewhere(message_id: str, reader_id: str) -> None:
    other = database.SessionLocal()
    try:
        other.add(
            MessageReadModel(message_id=message_id, user_id=reader_id, read_at=utcnow_naive())
        )
        other.commit()
    finally:
        other.close()


def test_concurrent_conversation_creation_returns_the_winner(
    db_session, make_user, monkeypatch: pytest.MonkeyPatch
) -> None:
    make_user("alice")
    make_user("bob")
    original_find = ConversationRepository.find_between
    calls = []

    def find_after_other_request_created(self, user_a, user_b):
        calls.append((user_a, user_b))
        if len(calls) == 1:
            other = database.SessionLocal()
            try:
                ConversationRepository(other).create("bob", "alice")
            finally:
                other.close()
            return None
        return original_find(self, user_a, user_b)

    monkeypatch.setattr(ConversationRepository, "find_between", find_after_other_request_created)

    conversation, created = get_or_create_conversation(
        db_session, current_user_id="alice", other_user_id="bob"
    )

    assert created is False
    assert len(calls) == 2
    assert db_session.query(ConversationModel).count() == 1
    assert db_session.query(ConversationModel).one().id == conversation.id


def test_concurrent_receipt_is_retried_without_duplicates(
    db_session, publisher, conversation_id, monkeypatch: pytest.MonkeyPatch
) -> None:
    first = _send(db_session, publisher, conversation_id, "alice", "one")
    second = _send(db_session, publisher, conversation_id, "alice", "two")
    original_unread = MessageRepository._unread_ids
    calls = []

    def unread_then_race(self, ids, *, conversation_id, reader_id):
        pending = original_unread(self, ids, conversation_id=conversation_id, reader_id=reader_id)
        calls.append(pending)
        if len(calls) == 1:
            _record_receipt_elsewhere(first, reader_id)
        return pending

    monkeypatch.setattr(MessageRepository, "_unread_ids", unread_then_race)

    marked = MessageRepository(db_session).mark_read(
        [first, second], conversation_id=conversation_id, reader_id="bob"
    )

    assert marked == [second]
    assert len(calls) == 2
    receipts = db_session.query(MessageReadModel).filter(MessageReadModel.user_id == "bob").all()
    assert sorted(row.message_id for row in receipts) == sorted([first, second])
    assert get_unread_count(db_session, user_id="bob") == 0


def test_receipts_changing_on_every_attempt_raise_conflict(
    db_session, publisher, conversation_id, monkeypatch: pytest.MonkeyPatch
) -> None:
    first = _send(db_session, publisher, conversation_id, "alice", "one")
    second = _send(db_session, publisher, conversation_id, "alice", "two")
    pending_by_attempt = iter([[first, second], [second]])

    def stale_unread(self, ids, *, conversation_id, reader_id):
        pending = next(pending_by_attempt)
        _record_receipt_elsewhere(pending[0], reader_id)
        return pending

    monkeypatch.setattr(MessageRepository, "_unread_ids", stale_unread)

    with pytest.raises(ConflictError):
        MessageRepository(db_session).mark_read(
            [first, second], conversation_id=conversation_id, reader_id="bob"
        )
