"""Routes for buyer/vendor conversations and messages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from marketchat.application.use_cases.chat import (
    get_conversation_with_other_user,
    get_or_create_conversation,
    get_unread_count,
    list_conversations as list_conversations_uc,
    list_messages as list_messages_uc,
    mark_messages_read,
    send_message as send_message_uc,
)
from marketchat.application.use_cases.realtime import issue_channel_token
from marketchat.domain.entities import (
    ChannelToken,
    Conversation,
    ConversationSummary,
    Message,
    User,
    UserProfile,
)
from marketchat.domain.errors import MarketChatError
from marketchat.infrastructure.database import get_db
from marketchat.infrastructure.realtime import ChannelPublisher
from marketchat.interfaces.api.dependencies import get_current_user, get_publisher
from marketchat.interfaces.api.routes_helpers import to_http_exception
from marketchat.interfaces.api.schemas import (
    ChannelTokenRead,
    ConversationCreate,
    ConversationDetail,
    ConversationRead,
    ConversationSummaryRead,
    MarkReadRequest,
    MarkReadResponse,
    MessagePreviewRead,
    MessageRead,
    MessageSendRequest,
    UnreadCountResponse,
    UserProfileRead,
)

router = APIRouter(prefix="/chat", tags=["chat"])


def _profile_to_schema(profile: UserProfile | None) -> UserProfileRead | None:
    if profile is None:
        return None
    return UserProfileRead(
        id=profile.id, name=profile.name, username=profile.username, image=profile.image
    )


def _conversation_fields(conversation: Conversation) -> dict[str, object]:
    return {
        "id": conversation.id,
        "user1_id": conversation.user1_id,
        "user2_id": conversation.user2_id,
        "last_message_at": conversation.last_message_at,
        "created_at": conversation.created_at,
    }


def _summary_to_schema(summary: ConversationSummary) -> ConversationSummaryRead:
    last_message = summary.last_message
    return ConversationSummaryRead(
        **_conversation_fields(summary.conversation),
        user1=_profile_to_schema(summary.user1),
        user2=_profile_to_schema(summary.user2),
        last_message=(
            MessagePreviewRead(
                id=last_message.id,
                sender_id=last_message.sender_id,
                content=last_message.content,
                created_at=last_message.created_at,
            )
            if last_message
            else None
        ),
        unread_count=summary.unread_count,
    )


def _message_to_schema(message: Message) -> MessageRead:
    return MessageRead(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        content=message.content,
        created_at=message.created_at,
        read_by=list(message.read_by),
        sender=_profile_to_schema(message.sender),
    )


def token_to_schema(token: ChannelToken) -> ChannelTokenRead:
    return ChannelTokenRead(
        token=token.token,
        client_id=token.client_id,
        capabilities=token.capabilities,
        ttl=token.ttl,
        expires_at=token.expires_at,
    )


@router.post("/conversations", response_model=ConversationRead)
def open_conversation(
    payload: ConversationCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ConversationRead:
    """Return the conversation with ``recipient_id``, creating it on first contact."""

    try:
        conversation, created = get_or_create_conversation(
            db, current_user_id=current_user.id, other_user_id=payload.recipient_id
        )
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return ConversationRead(**_conversation_fields(conversation))


@router.get("/conversations", response_model=list[ConversationSummaryRead])
def list_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[ConversationSummaryRead]:
    summaries = list_conversations_uc(db, user_id=current_user.id)
    return [_summary_to_schema(summary) for summary in summaries]


@router.get("/conversations/{conversation_id}", response_model=ConversationDetail)
def read_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ConversationDetail:
    try:
        conversation, other = get_conversation_with_other_user(
            db, conversation_id=conversation_id, user_id=current_user.id
        )
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc

    return ConversationDetail(
        **_conversation_fields(conversation), other_user=_profile_to_schema(other)
    )


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageRead])
def list_messages(
    conversation_id: str,
    limit: int | None = Query(default=None, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[MessageRead]:
    """Return the conversation messages, newest first."""

    try:
        messages = list_messages_uc(
            db, conversation_id=conversation_id, user_id=current_user.id, limit=limit
        )
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc
    return [_message_to_schema(message) for message in messages]


@router.post("/messages/send", response_model=MessageRead)
def send_message(
    payload: MessageSendRequest,
    db: Session = Depends(get_db),
    publisher: ChannelPublisher = Depends(get_publisher),
    current_user: User = Depends(get_current_user),
) -> MessageRead:
    try:
        message = send_message_uc(
            db,
            publisher,
            sender_id=current_user.id,
            conversation_id=payload.conversation_id or "",
            content=payload.content,
        )
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc
    return _message_to_schema(message)


@router.post("/messages/mark-read", response_model=MarkReadResponse)
def mark_read(
    payload: MarkReadRequest,
    db: Session = Depends(get_db),
    publisher: ChannelPublisher = Depends(get_publisher),
    current_user: User = Depends(get_current_user),
) -> MarkReadResponse:
    try:
        marked = mark_messages_read(
            db,
            publisher,
            reader_id=current_user.id,
            conversation_id=payload.conversation_id or "",
            message_ids=payload.message_ids or [],
        )
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc
    return MarkReadResponse(success=True, marked=marked)


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=get_unread_count(db, user_id=current_user.id))


@router.get("/token", response_model=ChannelTokenRead)
def chat_token(
    conversation_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ChannelTokenRead:
    """Issue a token restricted to one conversation channel."""

    try:
        token = issue_channel_token(
            db, user=current_user, conversation_id=conversation_id or ""
        )
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc
    return token_to_schema(token)
