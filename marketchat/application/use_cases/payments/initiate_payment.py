"""Use case for starting a bKash checkout for an existing order."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from marketchat.domain.entities import PAYMENT_METHOD_BKASH
from marketchat.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    UpstreamUnavailableError,
)
from marketchat.infrastructure.bkash import STATUS_SUCCESS, BkashClient
from marketchat.infrastructure.repositories import OrderRepository
from marketchat.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def initiate_bkash_payment(
    session: Session,
    client: BkashClient,
    *,
    order_number: str,
    user_id: str,
    callback_url: str,
) -> str:
    """Create the bKash payment and return the URL the buyer must visit."""

    repository = OrderRepository(session)
    order = repository.get_by_order_number(order_number)
    if order is None:
        raise NotFoundError("Order not found")
    if order.user_id != user_id:
        raise ForbiddenError("Forbidden: This order belongs to another user.")
    if order.payment_method != PAYMENT_METHOD_BKASH:
        raise InvalidArgumentError("Order is not payable through bKash")
    if order.is_paid():
        raise ConflictError("Order is already paid")

    response = client.create_payment(
        amount=order.total,
        order_number=order.order_number,
        callback_url=callback_url,
        payer_reference=user_id,
    )
    if response.get("statusCode") != STATUS_SUCCESS or not response.get("bkashURL"):
        reason = response.get("statusMessage") or "Failed to create payment"
        repository.mark_failed(
            order.order_number,
            details={
                "failure_reason": reason,
                "failed_at": now_in_app_timezone().isoformat(),
                "payment_failed_response": response,
            },
        )
        logger.warning("bKash create payment failed for order %s: %s", order.order_number, reason)
        raise UpstreamUnavailableError(reason)

    repository.merge_metadata(
        order.order_number,
        {
            "bkash_payment_id": response.get("paymentID"),
            "payment_initiated_at": now_in_app_timezone().isoformat(),
            "payment_pending": True,
        },
    )
    return response["bkashURL"]


__all__ = ["initiate_bkash_payment"]
