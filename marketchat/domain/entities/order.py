"""Domain entities for orders reconciled against the payment provider."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

ORDER_STATUS_PENDING = "PENDING"
ORDER_STATUS_PROCESSING = "PROCESSING"
ORDER_STATUS_SHIPPED = "SHIPPED"
ORDER_STATUS_DELIVERED = "DELIVERED"
ORDER_STATUS_CANCELLED = "CANCELLED"
ORDER_STATUS_REFUNDED = "REFUNDED"

PAYMENT_STATUS_PENDING = "PENDING"
PAYMENT_STATUS_PAID = "PAID"
PAYMENT_STATUS_FAILED = "FAILED"
PAYMENT_STATUS_REFUNDED = "REFUNDED"
PAYMENT_STATUS_PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"

PAYMENT_METHOD_BKASH = "BKASH"
PAYMENT_METHOD_CASH_ON_DELIVERY = "CASH_ON_DELIVERY"


@dataclass
class OrderItem:
    id: str | None
    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    shop_id: str | None = None


@dataclass
class Order:
    """Order aggregate. ``metadata`` is the payment provider audit trail."""

    id: str | None
    order_number: str
    user_id: str
    status: str
    payment_status: str
    payment_method: str
    total: Decimal
    currency: str = "BDT"
    metadata: dict[str, Any] = field(default_factory=dict)
    items: list[OrderItem] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_paid(self) -> bool:
        return self.payment_status == PAYMENT_STATUS_PAID


__all__ = [
    "ORDER_STATUS_PENDING",
    "ORDER_STATUS_PROCESSING",
    "ORDER_STATUS_SHIPPED",
    "ORDER_STATUS_DELIVERED",
    "ORDER_STATUS_CANCELLED",
    "ORDER_STATUS_REFUNDED",
    "PAYMENT_STATUS_PENDING",
    "PAYMENT_STATUS_PAID",
    "PAYMENT_STATUS_FAILED",
    "PAYMENT_STATUS_REFUNDED",
    "PAYMENT_STATUS_PARTIALLY_REFUNDED",
    "PAYMENT_METHOD_BKASH",
    "PAYMENT_METHOD_CASH_ON_DELIVERY",
    "Order",
    "OrderItem",
]
