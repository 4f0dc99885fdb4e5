"""Use case for issuing scoped realtime channel tokens."""

from __future__ import annotations

from sqlalchemy.orm import Session

from marketchat.config import get_settings
from marketchat.domain.channels import (
    OP_PRESENCE,
    OP_PUBLISH,
    OP_SUBSCRIBE,
    conversation_channel,
    inbox_channel,
    unread_channel,
)
from marketchat.domain.entities import ChannelToken, User
from marketchat.domain.errors import UnauthenticatedError
from marketchat.infrastructure.security import create_channel_token

from ..chat.conversations import get_conversation_for_participant


def _personal_capabilities(user_id: str) -> dict[str, list[str]]:
    return {
        inbox_channel(user_id): [OP_SUBSCRIBE],
        unread_channel(user_id): [OP_SUBSCRIBE],
    }


def issue_channel_token(
    session: Session, *, user: User | None, conversation_id: str | None = None
) -> ChannelToken:
    """Sign a token for ``user``.

    With ``conversation_id`` the token grants publish, subscribe and presence
    on that conversation's channel only, after checking the user takes part
    in it. Without it the token grants subscribe on the user's personal
    channels.
    """

    if user is None:
        raise UnauthenticatedError("Unauthorized")

    if conversation_id is not None:
        conversation = get_conversation_for_participant(
            session, conversation_id=conversation_id, user_id=user.id
        )
        capabilities = {
            conversation_channel(conversation.id): [OP_PUBLISH, OP_SUBSCRIBE, OP_PRESENCE]
        }
    else:
        capabilities = _personal_capabilities(user.id)

    ttl = get_settings().realtime_token_ttl_seconds
    token, expires_at = create_channel_token(user.id, capabilities, ttl)
    return ChannelToken(
        token=token,
        client_id=user.id,
        capabilities=capabilities,
        ttl=ttl,
        expires_at=expires_at,
    )


__all__ = ["issue_channel_token"]
