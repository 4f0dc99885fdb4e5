"""Persistence layer for user data."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from marketchat.domain.entities import User, UserProfile
from marketchat.infrastructure.models import UserModel
from marketchat.utils import ensure_utc


class UserRepository:
    """Read access to users owned by the auth provider."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_map_by_ids(self, user_ids: Sequence[str]) -> dict[str, User]:
        if not user_ids:
            return {}

        query = self.session.query(UserModel).filter(UserModel.id.in_(set(user_ids)))
        return {model.id: self._to_entity(model) for model in query.all()}

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            username=model.username,
            image=model.image,
            role=model.role,
            created_at=ensure_utc(model.created_at),
        )

    @staticmethod
    def to_profile(model: UserModel | None, fallback_id: str) -> UserProfile:
        if model is None:
            return UserProfile(id=fallback_id)
        return UserProfile(
            id=model.id, name=model.name, username=model.username, image=model.image
        )


__all__ = ["UserRepository"]
