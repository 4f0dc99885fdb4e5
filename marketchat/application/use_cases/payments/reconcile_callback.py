"""Reconcile bKash checkout callbacks against stored orders."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketchat.domain.entities import Order
from marketchat.infrastructure.bkash import STATUS_SUCCESS, TRANSACTION_COMPLETED, BkashClient
from marketchat.infrastructure.realtime import ChannelPublisher
from marketchat.infrastructure.repositories import OrderRepository
from marketchat.utils import now_in_app_timezone

from ..notifications import notify_order_paid

logger = logging.getLogger(__name__)

CALLBACK_STATUS_SUCCESS = "success"

CONFIRMATION_PATH = "/dashboard/order/order-confirmation"
CANCEL_PATH = "/dashboard/order/cancel"
SERVER_ERROR_PATH = "/cancel"


@dataclass(frozen=True)
class CallbackOutcome:
    """Where to send the browser after a callback and why."""

    redirect_path: str
    order_number: str | None = None
    reason: str | None = None


def _cancel(
    *,
    order_number: str | None = None,
    reason: str | None = None,
    error: str | None = None,
) -> CallbackOutcome:
    params: dict[str, str] = {}
    if error:
        params["error"] = error
    if reason:
        params["reason"] = reason
    path = f"{CANCEL_PATH}?{urlencode(params)}" if params else CANCEL_PATH
    return CallbackOutcome(redirect_path=path, order_number=order_number, reason=reason or error)


def _confirmation(order_number: str) -> CallbackOutcome:
    return CallbackOutcome(
        redirect_path=f"{CONFIRMATION_PATH}?{urlencode({'orderId': order_number})}",
        order_number=order_number,
    )


def _resolve_order(
    repository: OrderRepository, payment_id: str, response: dict[str, Any]
) -> Order | None:
    order_number = response.get("merchantInvoiceNumber")
    if order_number:
        order = repository.get_by_order_number(order_number)
        if order is not None:
            return order
    return repository.find_by_payment_id(payment_id)


def _confirm_with_provider(client: BkashClient, payment_id: str) -> tuple[bool, dict[str, Any]]:
    """Execute the payment, falling back to a status query.

    A payment that was already executed (for instance on a redelivered
    callback) reports a failure on execute but ``Completed`` on query.
    """

    executed = client.execute_payment(payment_id)
    if executed.get("statusCode") == STATUS_SUCCESS:
        return True, executed

    logger.warning(
        "bKash execute for %s returned %s; querying status",
        payment_id,
        executed.get("statusCode"),
    )
    queried = client.query_payment(payment_id)
    if queried.get("transactionStatus") == TRANSACTION_COMPLETED:
        return True, queried
    return False, executed if queried.get("statusCode") == "500" else queried


def _mark_failed(
    repository: OrderRepository, order: Order | None, *, reason: str, status: str | None
) -> None:
    if order is None:
        return
    _, transitioned = repository.mark_failed(
        order.order_number,
        details={
            "failure_reason": reason,
            "failed_at": now_in_app_timezone().isoformat(),
            "callback_status": status,
        },
    )
    if transitioned:
        logger.info("Order %s marked as payment failed: %s", order.order_number, reason)


def _notify_paid(
    session: Session, publisher: ChannelPublisher, repository: OrderRepository, order: Order
) -> None:
    try:
        notify_order_paid(
            session,
            publisher,
            order=order,
            shop_owner_ids=repository.list_shop_owner_ids(order),
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not notify participants of order %s", order.order_number)


def _reconcile(
    session: Session,
    client: BkashClient,
    publisher: ChannelPublisher,
    *,
    payment_id: str,
    status: str | None,
    status_message: str | None,
) -> CallbackOutcome:
    repository = OrderRepository(session)

    if status != CALLBACK_STATUS_SUCCESS:
        reason = status_message or status or "Payment was not completed"
        order = repository.find_by_payment_id(payment_id)
        _mark_failed(repository, order, reason=reason, status=status)
        return _cancel(order_number=order.order_number if order else None, reason=reason)

    confirmed, response = _confirm_with_provider(client, payment_id)
    order = _resolve_order(repository, payment_id, response)

    if not confirmed:
        if order is not None and order.is_paid():
            return _confirmation(order.order_number)
        reason = response.get("statusMessage") or "Payment execution failed"
        _mark_failed(repository, order, reason=reason, status=status)
        return _cancel(order_number=order.order_number if order else None, reason=reason)

    if order is None:
        logger.error("No order found for confirmed bKash payment %s", payment_id)
        return _cancel(error="order_not_found")

    paid, applied = repository.apply_payment_success(
        order.order_number,
        details={
            "bkash_transaction_id": response.get("trxID"),
            "payment_id": response.get("paymentID") or payment_id,
            "payment_executed_at": now_in_app_timezone().isoformat(),
            "payment_complete": True,
            "payment_pending": False,
            "bkash_response": response,
        },
    )
    if paid is None:
        return _cancel(error="order_not_found")

    if applied:
        logger.info("Order %s paid through bKash payment %s", paid.order_number, payment_id)
        _notify_paid(session, publisher, repository, paid)
    else:
        logger.info("Order %s already paid; ignoring redelivered callback", paid.order_number)

    return _confirmation(paid.order_number)


def reconcile_bkash_callback(
    session: Session,
    client: BkashClient,
    publisher: ChannelPublisher,
    *,
    payment_id: str | None,
    status: str | None,
    status_message: str | None = None,
) -> CallbackOutcome:
    """Apply the provider's verdict for ``payment_id`` to its order.

    Never raises; every failure resolves to a cancellation redirect.
    """

    if not payment_id:
        return _cancel(error="missing_payment_id")

    try:
        return _reconcile(
            session,
            client,
            publisher,
            payment_id=payment_id,
            status=status,
            status_message=status_message,
        )
    except Exception:
        session.rollback()
        logger.exception("bKash callback processing failed for payment %s", payment_id)
        return CallbackOutcome(
            redirect_path=f"{SERVER_ERROR_PATH}?{urlencode({'error': 'server_error'})}",
            reason="server_error",
        )


__all__ = ["CallbackOutcome", "reconcile_bkash_callback"]
