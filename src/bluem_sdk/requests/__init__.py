"""Request builders, one class per request transaction code."""
from .base import ADDITIONAL_DATA_KEYS, TransactionRequest
from .iban import IBANNameCheckRequest
from .identity import (
    IDENTITY_REQUEST_TYPES,
    IdentityStatusRequest,
    IdentityTransactionRequest,
    get_identity_request_types,
)
from .mandates import EMandateStatusRequest, EMandateTransactionRequest
from .payments import PaymentStatusRequest, PaymentTransactionRequest, format_amount

__all__ = [
    "ADDITIONAL_DATA_KEYS",
    "IDENTITY_REQUEST_TYPES",
    "EMandateStatusRequest",
    "EMandateTransactionRequest",
    "IBANNameCheckRequest",
    "IdentityStatusRequest",
    "IdentityTransactionRequest",
    "PaymentStatusRequest",
    "PaymentTransactionRequest",
    "TransactionRequest",
    "format_amount",
    "get_identity_request_types",
]
