"""Pydantic models describing checkout payloads."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PaymentInitiationResponse(BaseModel):
    url: str = Field(description="bKash page the buyer must be redirected to")
    order_number: str


__all__ = ["PaymentInitiationResponse"]
