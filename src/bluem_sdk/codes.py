"""Transaction families and transaction codes."""
from __future__ import annotations

from enum import Enum
from typing import Any

from .models.errors import InvalidTransactionTypeError


class TransactionFamily(str, Enum):
    """Product family a transaction belongs to."""

    MANDATES = "Mandates"
    PAYMENTS = "Payments"
    IDENTITY = "Identity"
    IBAN_CHECK = "IBANCheck"


class RequestType(str, Enum):
    """``type`` attribute of the outer interface element."""

    TRANSACTION_REQUEST = "TransactionRequest"
    STATUS_REQUEST = "StatusRequest"
    ERROR_RESPONSE = "ErrorResponse"


class TransactionCode(str, Enum):
    """Provider transaction codes.

    The ``X`` codes are the ones requests are sent with; the others are the
    document types the provider answers or pushes status updates with.
    """

    # e-mandates
    MANDATE_STATUS = "SRX"
    MANDATE_STATUS_UPDATE = "SUD"
    MANDATE_TRANSACTION = "TRX"
    MANDATE_TRANSACTION_RESPONSE = "TRS"
    # payments
    PAYMENT_STATUS_UPDATE = "PSU"
    PAYMENT_STATUS = "PSX"
    PAYMENT_TRANSACTION_RESPONSE = "PTS"
    PAYMENT_TRANSACTION = "PTX"
    # identity
    IDENTITY_STATUS_UPDATE = "ISU"
    IDENTITY_STATUS = "ISX"
    IDENTITY_TRANSACTION = "ITX"
    # IBAN-name check
    IBAN_NAME_CHECK_RESPONSE = "INS"
    IBAN_NAME_CHECK = "INX"

    @classmethod
    def parse(cls, value: Any) -> "TransactionCode":
        """Resolve a code, raising ``InvalidTransactionTypeError`` for unknown ones."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidTransactionTypeError(value) from None

    @property
    def family(self) -> TransactionFamily:
        try:
            return _FAMILIES[self]
        except KeyError:
            raise InvalidTransactionTypeError(self.value) from None

    @property
    def is_request(self) -> bool:
        return self.value.endswith("X")


_FAMILIES: dict[TransactionCode, TransactionFamily] = {
    TransactionCode.MANDATE_STATUS: TransactionFamily.MANDATES,
    TransactionCode.MANDATE_STATUS_UPDATE: TransactionFamily.MANDATES,
    TransactionCode.MANDATE_TRANSACTION: TransactionFamily.MANDATES,
    TransactionCode.MANDATE_TRANSACTION_RESPONSE: TransactionFamily.MANDATES,
    TransactionCode.PAYMENT_STATUS_UPDATE: TransactionFamily.PAYMENTS,
    TransactionCode.PAYMENT_STATUS: TransactionFamily.PAYMENTS,
    TransactionCode.PAYMENT_TRANSACTION_RESPONSE: TransactionFamily.PAYMENTS,
    TransactionCode.PAYMENT_TRANSACTION: TransactionFamily.PAYMENTS,
    TransactionCode.IDENTITY_STATUS_UPDATE: TransactionFamily.IDENTITY,
    TransactionCode.IDENTITY_STATUS: TransactionFamily.IDENTITY,
    TransactionCode.IDENTITY_TRANSACTION: TransactionFamily.IDENTITY,
    TransactionCode.IBAN_NAME_CHECK_RESPONSE: TransactionFamily.IBAN_CHECK,
    TransactionCode.IBAN_NAME_CHECK: TransactionFamily.IBAN_CHECK,
}
