"""bKash tokenized checkout client.

The provider answers every call with a JSON body carrying ``statusCode`` and
``statusMessage``; ``"0000"`` means success. Transport failures are folded
into the same shape (``statusCode="500"``) so reconciliation code only has
one failure branch to follow.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import httpx

from marketchat.config import Settings, get_settings

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "0000"
TRANSACTION_COMPLETED = "Completed"

_TOKEN_TTL = timedelta(hours=1)
_TOKEN_REFRESH_BUFFER = timedelta(minutes=5)


class BkashConfigurationError(RuntimeError):
    """Raised when bKash credentials are not configured."""


class BkashClient:
    """Synchronous client for the bKash tokenized checkout API."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        if not self._settings.bkash_enabled:
            raise BkashConfigurationError("bKash credentials are not configured")
        self._base_url = (self._settings.bkash_base_url or "").rstrip("/")
        self._http = http_client or httpx.Client(timeout=30.0)
        self._token: str | None = None
        self._token_expires: datetime | None = None
        self._token_lock = threading.Lock()

    def close(self) -> None:
        self._http.close()

    def create_payment(
        self,
        *,
        amount: Decimal,
        order_number: str,
        callback_url: str,
        payer_reference: str = "1",
    ) -> dict[str, Any]:
        if not amount or amount < 1:
            return {
                "statusCode": "2065",
                "statusMessage": "amount required" if not amount else "minimum amount 1",
            }
        if not callback_url:
            return {"statusCode": "2065", "statusMessage": "callbackURL required"}

        return self._post(
            "/tokenized/checkout/create",
            {
                "mode": "0011",
                "currency": "BDT",
                "intent": "sale",
                "amount": str(amount),
                "callbackURL": callback_url,
                "payerReference": payer_reference or "1",
                "merchantInvoiceNumber": order_number,
            },
            action="create payment",
        )

    def execute_payment(self, payment_id: str) -> dict[str, Any]:
        return self._post(
            "/tokenized/checkout/execute", {"paymentID": payment_id}, action="execute payment"
        )

    def query_payment(self, payment_id: str) -> dict[str, Any]:
        return self._post(
            "/tokenized/checkout/payment/status",
            {"paymentID": payment_id},
            action="query payment status",
        )

    def _post(self, path: str, body: dict[str, Any], *, action: str) -> dict[str, Any]:
        try:
            response = self._http.post(
                f"{self._base_url}{path}", json=body, headers=self._auth_headers()
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("bKash %s failed with status %s", action, exc.response.status_code)
            return self._failure(action, exc.response.text)
        except (httpx.RequestError, ValueError) as exc:
            logger.error("bKash %s error: %s", action, exc)
            return self._failure(action, str(exc))

    @staticmethod
    def _failure(action: str, detail: str) -> dict[str, Any]:
        return {
            "statusCode": "500",
            "statusMessage": f"Failed to {action}",
            "error": detail,
        }

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "authorization": self._grant_token(),
            "x-app-key": self._settings.bkash_app_key or "",
        }

    def _token_expired(self) -> bool:
        if self._token is None or self._token_expires is None:
            return True
        return datetime.now(timezone.utc) >= self._token_expires - _TOKEN_REFRESH_BUFFER

    def _grant_token(self) -> str:
        with self._token_lock:
            if not self._token_expired():
                return self._token or ""

            response = self._http.post(
                f"{self._base_url}/tokenized/checkout/token/grant",
                json={
                    "app_key": self._settings.bkash_app_key,
                    "app_secret": self._settings.bkash_app_secret,
                },
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "username": self._settings.bkash_username or "",
                    "password": self._settings.bkash_password or "",
                },
            )
            response.raise_for_status()
            data = response.json()
            token = data.get("id_token")
            if not token:
                raise httpx.RequestError(
                    f"bKash token grant returned no id_token: {data.get('statusMessage')}",
                    request=response.request,
                )
            expires_in = data.get("expires_in")
            ttl = timedelta(seconds=int(expires_in)) if expires_in else _TOKEN_TTL
            self._token = token
            self._token_expires = datetime.now(timezone.utc) + ttl
            logger.info("bKash grant token refreshed")
            return token


__all__ = [
    "BkashClient",
    "BkashConfigurationError",
    "STATUS_SUCCESS",
    "TRANSACTION_COMPLETED",
]
