"""Webhook models for Bluem SDK."""
from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..codes import TransactionCode, TransactionFamily
from .base import BluemModel
from .responses import PaymentStatusResponse


class VerifiedWebhook(BluemModel):
    """Status update carried by an authenticated notification."""

    family: TransactionFamily
    transaction_code: TransactionCode
    status_update: PaymentStatusResponse


class WebhookResult(BluemModel):
    """Outcome of verifying one inbound notification."""

    accepted: bool
    http_status: int = 200
    payload: Optional[VerifiedWebhook] = None
    reason: Optional[str] = Field(default=None, description="Why the notification was rejected")

    @classmethod
    def accept(cls, payload: Optional[VerifiedWebhook] = None) -> "WebhookResult":
        return cls(accepted=True, http_status=200, payload=payload)

    @classmethod
    def reject(cls, reason: str) -> "WebhookResult":
        return cls(accepted=False, http_status=400, reason=reason)
