"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.sql import expression

from marketchat.infrastructure.database import Base, generate_id
from marketchat.utils import utcnow_naive


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"

    id = Column(String(32), primary_key=True, default=generate_id)
    recipient_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False, default="INFO")
    title = Column(String(120), nullable=False)
    message = Column(Text, nullable=False)
    action_url = Column(String(500), nullable=True)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    created_at = Column(DateTime, nullable=False, default=utcnow_naive)


__all__ = ["NotificationModel"]
