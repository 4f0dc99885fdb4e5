"""Domain entities exposed by the application."""

from .channel_token import ChannelToken
from .conversation import (
    Conversation,
    ConversationSummary,
    Message,
    MessagePreview,
    canonical_pair,
)
from .notification import (
    NOTIFICATION_TYPE_ERROR,
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_SUCCESS,
    NOTIFICATION_TYPE_WARNING,
    Notification,
)
from .order import (
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_PENDING,
    ORDER_STATUS_PROCESSING,
    PAYMENT_METHOD_BKASH,
    PAYMENT_STATUS_FAILED,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PENDING,
    Order,
    OrderItem,
)
from .user import (
    USER_ROLE_ADMIN,
    USER_ROLE_CUSTOMER,
    USER_ROLE_VENDOR,
    User,
    UserProfile,
)

__all__ = [
    "ChannelToken",
    "Conversation",
    "ConversationSummary",
    "Message",
    "MessagePreview",
    "canonical_pair",
    "Notification",
    "NOTIFICATION_TYPE_INFO",
    "NOTIFICATION_TYPE_SUCCESS",
    "NOTIFICATION_TYPE_WARNING",
    "NOTIFICATION_TYPE_ERROR",
    "Order",
    "OrderItem",
    "ORDER_STATUS_PENDING",
    "ORDER_STATUS_PROCESSING",
    "ORDER_STATUS_CANCELLED",
    "PAYMENT_STATUS_PENDING",
    "PAYMENT_STATUS_PAID",
    "PAYMENT_STATUS_FAILED",
    "PAYMENT_METHOD_BKASH",
    "User",
    "UserProfile",
    "USER_ROLE_CUSTOMER",
    "USER_ROLE_VENDOR",
    "USER_ROLE_ADMIN",
]
