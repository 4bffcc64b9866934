"""Identifier generation.

All helpers are pure functions of their inputs and the clock; ``now`` can be
passed in to make the output deterministic.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .constants import (
    MANDATE_ID_MAX_LENGTH,
    PROVIDER_TIMEZONE,
    TIMESTAMP_MANDATE_SENDER_ID,
    TRANSACTION_REFERENCE_MAX_LENGTH,
    DateFormats,
)


def _provider_now(now: Optional[datetime] = None) -> datetime:
    if now is None:
        return datetime.now(PROVIDER_TIMEZONE)
    if now.tzinfo is None:
        return now.replace(tzinfo=PROVIDER_TIMEZONE)
    return now.astimezone(PROVIDER_TIMEZONE)


def create_entrance_code(now: Optional[datetime] = None) -> str:
    """Create an entrance code: ``YYYYMMDDHHMMSS`` plus milliseconds.

    UTC is used so codes keep increasing across daylight saving changes.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return f"{now:{DateFormats.ID_TIMESTAMP}}{now.microsecond // 1000:03d}"


def create_mandate_id(
    order_id: str,
    customer_id: str,
    sender_id: str,
    now: Optional[datetime] = None,
) -> str:
    """Create a mandate ID.

    The reserved timestamp sender gets ``M`` plus an Amsterdam timestamp;
    everyone else gets customer ID, Amsterdam date and order ID, cut to the
    maximum mandate ID length.
    """
    local = _provider_now(now)
    if sender_id == TIMESTAMP_MANDATE_SENDER_ID:
        return "M" + local.strftime(DateFormats.ID_TIMESTAMP)
    mandate_id = f"{customer_id}{local.strftime(DateFormats.ID_DATE)}{order_id}"
    return mandate_id[:MANDATE_ID_MAX_LENGTH]


def create_payment_transaction_id(reference: str, now: Optional[datetime] = None) -> str:
    local = _provider_now(now)
    return f"{reference[:TRANSACTION_REFERENCE_MAX_LENGTH]}{local.strftime(DateFormats.ID_DATE)}"


def create_identity_transaction_id(reference: str, now: Optional[datetime] = None) -> str:
    return create_payment_transaction_id(reference, now=now)
