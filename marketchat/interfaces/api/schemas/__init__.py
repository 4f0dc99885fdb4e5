from .chat import (
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
from .checkout import PaymentInitiationResponse
from .notification import NotificationRead, SuccessResponse
from .realtime import ChannelTokenRead

__all__ = [
    "ChannelTokenRead",
    "ConversationCreate",
    "ConversationDetail",
    "ConversationRead",
    "ConversationSummaryRead",
    "MarkReadRequest",
    "MarkReadResponse",
    "MessagePreviewRead",
    "MessageRead",
    "MessageSendRequest",
    "NotificationRead",
    "PaymentInitiationResponse",
    "SuccessResponse",
    "UnreadCountResponse",
    "UserProfileRead",
]
