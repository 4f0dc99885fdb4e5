"""Domain entity representing a marketplace user."""

from dataclasses import dataclass
from datetime import datetime

USER_ROLE_CUSTOMER = "CUSTOMER"
USER_ROLE_VENDOR = "VENDOR"
USER_ROLE_ADMIN = "ADMIN"


@dataclass
class UserProfile:
    """Public fields of a user that are safe to share with other users."""

    id: str
    name: str | None = None
    username: str | None = None
    image: str | None = None


@dataclass
class User:
    """Identity owned by the auth provider and referenced by the chat core."""

    id: str
    name: str | None
    username: str | None
    image: str | None
    role: str = USER_ROLE_CUSTOMER
    created_at: datetime | None = None

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.role.upper() == USER_ROLE_ADMIN

    def profile(self) -> UserProfile:
        return UserProfile(
            id=self.id, name=self.name, username=self.username, image=self.image
        )


__all__ = [
    "USER_ROLE_CUSTOMER",
    "USER_ROLE_VENDOR",
    "USER_ROLE_ADMIN",
    "User",
    "UserProfile",
]
