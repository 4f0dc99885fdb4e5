"""Persistence helpers for conversation entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketchat.domain.entities import (
    Conversation,
    ConversationSummary,
    MessagePreview,
    canonical_pair,
)
from marketchat.domain.errors import ConflictError
from marketchat.infrastructure.models import ConversationModel, MessageModel
from marketchat.utils import ensure_utc, to_naive_utc, utcnow_naive

from .user_repository import UserRepository


class ConversationRepository:
    """Provide lookups and lazy creation for :class:`Conversation` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, conversation_id: str) -> Conversation | None:
        model = self.session.get(ConversationModel, conversation_id)
        return self._to_entity(model) if model else None

    def find_between(self, user_a: str, user_b: str) -> Conversation | None:
        """Return the conversation for the unordered pair, probing both orderings."""

        model = (
            self.session.query(ConversationModel)
            .filter(
                or_(
                    and_(
                        ConversationModel.user1_id == user_a,
                        ConversationModel.user2_id == user_b,
                    ),
                    and_(
                        ConversationModel.user1_id == user_b,
                        ConversationModel.user2_id == user_a,
                    ),
                )
            )
            .order_by(ConversationModel.created_at.asc())
            .first()
        )
        return self._to_entity(model) if model else None

    def create(
        self, user_a: str, user_b: str, *, created_at: datetime | None = None
    ) -> Conversation:
        """Insert a conversation with the pair stored in canonical order.

        Raises :class:`ConflictError` when another request already created it.
        """

        user1_id, user2_id = canonical_pair(user_a, user_b)
        now = to_naive_utc(created_at) or utcnow_naive()
        model = ConversationModel(
            user1_id=user1_id,
            user2_id=user2_id,
            last_message_at=now,
            created_at=now,
        )
        self.session.add(model)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError("Conversation already exists for this pair") from exc
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_user(self, user_id: str) -> Sequence[ConversationModel]:
        return (
            self.session.query(ConversationModel)
            .filter(
                or_(
                    ConversationModel.user1_id == user_id,
                    ConversationModel.user2_id == user_id,
                )
            )
            .order_by(ConversationModel.last_message_at.desc(), ConversationModel.id)
            .all()
        )

    def list_summaries_for_user(self, user_id: str) -> list[ConversationSummary]:
        return [self._to_summary(model) for model in self.list_for_user(user_id)]

    def get_summary(self, conversation_id: str) -> ConversationSummary | None:
        model = self.session.get(ConversationModel, conversation_id)
        return self._to_summary(model) if model else None

    def _latest_message(self, conversation_id: str) -> MessagePreview | None:
        latest = (
            self.session.query(MessageModel)
            .filter(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .first()
        )
        if latest is None:
            return None
        return MessagePreview(
            id=latest.id,
            sender_id=latest.sender_id,
            content=latest.content,
            created_at=ensure_utc(latest.created_at),
        )

    def _to_summary(self, model: ConversationModel) -> ConversationSummary:
        return ConversationSummary(
            conversation=self._to_entity(model),
            user1=UserRepository.to_profile(model.user1, model.user1_id),
            user2=UserRepository.to_profile(model.user2, model.user2_id),
            last_message=self._latest_message(model.id),
        )

    @staticmethod
    def _to_entity(model: ConversationModel) -> Conversation:
        return Conversation(
            id=model.id,
            user1_id=model.user1_id,
            user2_id=model.user2_id,
            last_message_at=ensure_utc(model.last_message_at),
            created_at=ensure_utc(model.created_at),
        )


__all__ = ["ConversationRepository"]
