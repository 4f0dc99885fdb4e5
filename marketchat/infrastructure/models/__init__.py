"""ORM models used by the application infrastructure."""

from .user import UserModel
from .conversation import ConversationModel, MessageModel, MessageReadModel
from .notification import NotificationModel
from .order import (
    CartItemModel,
    OrderItemModel,
    OrderModel,
    ProductModel,
    ShopModel,
)

__all__ = [
    "UserModel",
    "ConversationModel",
    "MessageModel",
    "MessageReadModel",
    "NotificationModel",
    "CartItemModel",
    "OrderItemModel",
    "OrderModel",
    "ProductModel",
    "ShopModel",
]
