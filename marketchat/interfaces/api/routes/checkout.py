"""Routes for the bKash online payment round trip."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from marketchat.application.use_cases.payments import (
    initiate_bkash_payment,
    reconcile_bkash_callback,
)
from marketchat.application.use_cases.payments.reconcile_callback import SERVER_ERROR_PATH
from marketchat.config import get_settings
from marketchat.domain.entities import User
from marketchat.domain.errors import MarketChatError
from marketchat.infrastructure.bkash import BkashClient, BkashConfigurationError
from marketchat.infrastructure.database import get_db
from marketchat.infrastructure.realtime import ChannelPublisher
from marketchat.interfaces.api.dependencies import (
    get_bkash_client,
    get_current_user,
    get_publisher,
    load_bkash_client,
)
from marketchat.interfaces.api.routes_helpers import to_http_exception
from marketchat.interfaces.api.schemas import PaymentInitiationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/bkash/{order_number}", response_model=PaymentInitiationResponse)
def start_bkash_payment(
    order_number: str,
    request: Request,
    db: Session = Depends(get_db),
    client: BkashClient = Depends(get_bkash_client),
    current_user: User = Depends(get_current_user),
) -> PaymentInitiationResponse:
    """Create a bKash payment for one of the caller's orders."""

    try:
        url = initiate_bkash_payment(
            db,
            client,
            order_number=order_number,
            user_id=current_user.id,
            callback_url=str(request.url_for("bkash_callback")),
        )
    except MarketChatError as exc:
        raise to_http_exception(exc) from exc
    return PaymentInitiationResponse(url=url, order_number=order_number)


@router.get("/callback", name="bkash_callback")
def bkash_callback(
    request: Request,
    payment_id: str | None = Query(default=None, alias="paymentID"),
    callback_status: str | None = Query(default=None, alias="status"),
    status_message: str | None = Query(default=None, alias="statusMessage"),
    db: Session = Depends(get_db),
    publisher: ChannelPublisher = Depends(get_publisher),
) -> RedirectResponse:
    """Landing endpoint for bKash; always answers with a redirect."""

    site_url = get_settings().site_url.rstrip("/")
    try:
        client = load_bkash_client(request)
    except BkashConfigurationError:
        logger.error("bKash callback received but bKash is not configured")
        return RedirectResponse(f"{site_url}{SERVER_ERROR_PATH}?error=server_error", status_code=303)

    outcome = reconcile_bkash_callback(
        db,
        client,
        publisher,
        payment_id=payment_id,
        status=callback_status,
        status_message=status_message,
    )
    return RedirectResponse(f"{site_url}{outcome.redirect_path}", status_code=303)
