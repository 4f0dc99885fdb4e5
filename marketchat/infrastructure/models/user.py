"""SQLAlchemy model for the user table."""

from sqlalchemy import Column, DateTime, String

from marketchat.infrastructure.database import Base
from marketchat.utils import utcnow_naive


class UserModel(Base):
    """Database representation of a marketplace user."""

    __tablename__ = "user"

    id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=True)
    username = Column(String(50), nullable=True, unique=True, index=True)
    image = Column(String(500), nullable=True)
    role = Column(String(20), nullable=False, default="CUSTOMER")
    created_at = Column(DateTime, nullable=False, default=utcnow_naive)


__all__ = ["UserModel"]
