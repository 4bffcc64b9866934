"""
Bluem SDK - Python client for the Bluem e-mandate, payment, identity and
IBAN-name check API.

Example:
    ```python
    from bluem_sdk import BluemClient

    with BluemClient.from_env() as client:
        response = client.payment("Order 123", "customer-42", "10.00")
        if response.status:
            print(response.transaction_url)
    ```
"""

from .classifier import classify_response, response_class_for
from .client import BluemClient
from .codes import RequestType, TransactionCode, TransactionFamily
from .config import (
    BluemConfig,
    BluemSettings,
    Environment,
    ExpectedReturnStatus,
    LocalInstrumentCode,
    SequenceType,
    load_config,
)
from .contexts import BankIssuer, TransactionContext, get_context
from .identifiers import (
    create_entrance_code,
    create_identity_transaction_id,
    create_mandate_id,
    create_payment_transaction_id,
)
from .models.errors import (
    BluemError,
    ConfigurationError,
    InvalidTransactionTypeError,
    ProtocolError,
    SchemaNotFoundError,
    SignatureError,
    TransportError,
    UnknownContextError,
    ValidationError,
)
from .models.responses import (
    BluemResponse,
    ErrorKind,
    ErrorResponse,
    IBANNameCheckResponse,
    IdentityStatusResponse,
    IdentityTransactionResponse,
    MandateStatusResponse,
    MandateTransactionResponse,
    MaximumAmount,
    PaymentStatusResponse,
    PaymentTransactionResponse,
    TransactionStatus,
)
from .models.webhook import VerifiedWebhook, WebhookResult
from .requests import (
    EMandateStatusRequest,
    EMandateTransactionRequest,
    IBANNameCheckRequest,
    IdentityStatusRequest,
    IdentityTransactionRequest,
    PaymentStatusRequest,
    PaymentTransactionRequest,
    TransactionRequest,
    get_identity_request_types,
)
from .transport import HttpTransport, TransportResponse, build_headers
from .validation import XmlSchemaValidator
from .webhooks import WebhookVerifier

__version__ = "0.1.0"

__all__ = [
    # Client
    "BluemClient",
    # Configuration
    "BluemConfig",
    "BluemSettings",
    "Environment",
    "ExpectedReturnStatus",
    "LocalInstrumentCode",
    "SequenceType",
    "load_config",
    # Codes and contexts
    "BankIssuer",
    "RequestType",
    "TransactionCode",
    "TransactionContext",
    "TransactionFamily",
    "get_context",
    # Identifiers
    "create_entrance_code",
    "create_identity_transaction_id",
    "create_mandate_id",
    "create_payment_transaction_id",
    # Requests
    "EMandateStatusRequest",
    "EMandateTransactionRequest",
    "IBANNameCheckRequest",
    "IdentityStatusRequest",
    "IdentityTransactionRequest",
    "PaymentStatusRequest",
    "PaymentTransactionRequest",
    "TransactionRequest",
    "get_identity_request_types",
    # Validation, transport, classification
    "HttpTransport",
    "TransportResponse",
    "XmlSchemaValidator",
    "build_headers",
    "classify_response",
    "response_class_for",
    # Responses
    "BluemResponse",
    "ErrorKind",
    "ErrorResponse",
    "IBANNameCheckResponse",
    "IdentityStatusResponse",
    "IdentityTransactionResponse",
    "MandateStatusResponse",
    "MandateTransactionResponse",
    "MaximumAmount",
    "PaymentStatusResponse",
    "PaymentTransactionResponse",
    "TransactionStatus",
    # Webhooks
    "VerifiedWebhook",
    "WebhookResult",
    "WebhookVerifier",
    # Errors
    "BluemError",
    "ConfigurationError",
    "InvalidTransactionTypeError",
    "ProtocolError",
    "SchemaNotFoundError",
    "SignatureError",
    "TransportError",
    "UnknownContextError",
    "ValidationError",
]
