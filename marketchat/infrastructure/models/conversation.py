"""SQLAlchemy models for conversations, messages and read receipts."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from marketchat.infrastructure.database import Base, generate_id
from marketchat.utils import utcnow_naive


class ConversationModel(Base):
    """A one-to-one conversation.

    New rows are written with ``user1_id < user2_id`` so the unique constraint
    covers the unordered pair.
    """

    __tablename__ = "conversation"
    __table_args__ = (
        UniqueConstraint("user1_id", "user2_id", name="uq_conversation_pair"),
    )

    id = Column(String(32), primary_key=True, default=generate_id)
    user1_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    user2_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    last_message_at = Column(DateTime, nullable=False, default=utcnow_naive, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow_naive)

    user1 = relationship("UserModel", foreign_keys=[user1_id], lazy="joined")
    user2 = relationship("UserModel", foreign_keys=[user2_id], lazy="joined")


class MessageModel(Base):
    """Database representation of a chat message."""

    __tablename__ = "message"
    __table_args__ = (
        Index("ix_message_conversation_created", "conversation_id", "created_at"),
    )

    id = Column(String(32), primary_key=True, default=generate_id)
    conversation_id = Column(
        String(32), ForeignKey("conversation.id", ondelete="CASCADE"), nullable=False
    )
    sender_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow_naive)

    sender = relationship("UserModel", lazy="joined")
    reads = relationship(
        "MessageReadModel",
        order_by="MessageReadModel.read_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )


class MessageReadModel(Base):
    """One row per (message, reader); the append-only ``readBy`` set."""

    __tablename__ = "message_read"
    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_message_read"),
    )

    id = Column(String(32), primary_key=True, default=generate_id)
    message_id = Column(
        String(32), ForeignKey("message.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    read_at = Column(DateTime, nullable=False, default=utcnow_naive)


__all__ = ["ConversationModel", "MessageModel", "MessageReadModel"]
