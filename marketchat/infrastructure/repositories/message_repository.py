"""Persistence helpers for messages and their read receipts."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import exists, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketchat.domain.entities import Message
from marketchat.domain.errors import ConflictError
from marketchat.infrastructure.models import (
    ConversationModel,
    MessageModel,
    MessageReadModel,
)
from marketchat.utils import ensure_utc, to_naive_utc, utcnow_naive

from .user_repository import UserRepository


class MessageRepository:
    """Provide storage, read-state updates and unread counting for messages."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, message_id: str) -> Message | None:
        model = self.session.get(MessageModel, message_id)
        return self._to_entity(model) if model else None

    def create(
        self,
        *,
        conversation_id: str,
        sender_id: str,
        content: str,
        created_at: datetime | None = None,
    ) -> Message:
        """Persist a message and bump the conversation recency in one commit."""

        now = to_naive_utc(created_at) or utcnow_naive()
        model = MessageModel(
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            created_at=now,
        )
        self.session.add(model)
        self.session.query(ConversationModel).filter(
            ConversationModel.id == conversation_id
        ).update({ConversationModel.last_message_at: now}, synchronize_session=False)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_conversation(
        self,
        conversation_id: str,
        *,
        newest_first: bool = True,
        limit: int | None = None,
    ) -> Sequence[Message]:
        order = (
            (MessageModel.created_at.desc(), MessageModel.id.desc())
            if newest_first
            else (MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        query = (
            self.session.query(MessageModel)
            .filter(MessageModel.conversation_id == conversation_id)
            .order_by(*order)
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def mark_read(
        self,
        message_ids: Iterable[str],
        *,
        conversation_id: str,
        reader_id: str,
    ) -> list[str]:
        """Record ``reader_id`` as a reader of the eligible ``message_ids``.

        A message is eligible when it belongs to ``conversation_id``, was not
        sent by the reader and has no receipt for the reader yet. Returns the
        identifiers that were newly marked.
        """

        ids = list(dict.fromkeys(message_ids))
        if not ids:
            return []

        for attempt in range(2):
            pending = self._unread_ids(ids, conversation_id=conversation_id, reader_id=reader_id)
            if not pending:
                return []
            now = utcnow_naive()
            self.session.add_all(
                MessageReadModel(message_id=message_id, user_id=reader_id, read_at=now)
                for message_id in pending
            )
            try:
                self.session.commit()
            except IntegrityError as exc:
                # A concurrent request recorded some of the same receipts.
                self.session.rollback()
                if attempt:
                    raise ConflictError("Read receipts changed concurrently") from exc
                continue
            return pending
        return []

    def count_unread(self, user_id: str) -> int:
        query = (
            self.session.query(func.count(MessageModel.id))
            .select_from(MessageModel)
            .join(ConversationModel, ConversationModel.id == MessageModel.conversation_id)
            .filter(*self._unread_filters(user_id))
        )
        return int(query.scalar() or 0)

    def count_unread_by_conversation(self, user_id: str) -> dict[str, int]:
        query = (
            self.session.query(MessageModel.conversation_id, func.count(MessageModel.id))
            .select_from(MessageModel)
            .join(ConversationModel, ConversationModel.id == MessageModel.conversation_id)
            .filter(*self._unread_filters(user_id))
            .group_by(MessageModel.conversation_id)
        )
        return {conversation_id: int(count) for conversation_id, count in query.all()}

    def _unread_ids(
        self, ids: Sequence[str], *, conversation_id: str, reader_id: str
    ) -> list[str]:
        rows = (
            self.session.query(MessageModel.id)
            .filter(
                MessageModel.id.in_(ids),
                MessageModel.conversation_id == conversation_id,
                MessageModel.sender_id != reader_id,
                ~self._read_by(reader_id),
            )
            .all()
        )
        return [message_id for (message_id,) in rows]

    @staticmethod
    def _read_by(user_id: str):
        return exists().where(
            MessageReadModel.message_id == MessageModel.id,
            MessageReadModel.user_id == user_id,
        )

    @classmethod
    def _unread_filters(cls, user_id: str) -> tuple:
        return (
            or_(
                ConversationModel.user1_id == user_id,
                ConversationModel.user2_id == user_id,
            ),
            MessageModel.sender_id != user_id,
            ~cls._read_by(user_id),
        )

    @staticmethod
    def _to_entity(model: MessageModel) -> Message:
        return Message(
            id=model.id,
            conversation_id=model.conversation_id,
            sender_id=model.sender_id,
            content=model.content,
            created_at=ensure_utc(model.created_at),
            read_by=[read.user_id for read in model.reads],
            sender=UserRepository.to_profile(model.sender, model.sender_id),
        )


__all__ = ["MessageRepository"]
