"""Bluem client."""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Union

import httpx

from .classifier import ClassifiedResponse, classify_response
from .config import BluemConfig, BluemSettings, ConfigInput, load_config
from .constants import DEFAULT_CURRENCY, ResponseMessages
from .contexts import BankIssuer, TransactionContext, get_context
from .identifiers import (
    create_entrance_code,
    create_identity_transaction_id,
    create_mandate_id,
    create_payment_transaction_id,
)
from .models.errors import TransportError, ValidationError
from .models.responses import ErrorKind, ErrorResponse, MandateStatusResponse, MaximumAmount
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
from .transport import HttpTransport, build_headers
from .validation import XmlSchemaValidator

logger = logging.getLogger(__name__)


class BluemClient:
    """
    Client for the Bluem transaction API.

    Every submitting method returns either a success response or an
    ``ErrorResponse``; the only exception that escapes is
    ``ConfigurationError`` (bad configuration, unknown context or code).

    Example usage:
        ```python
        client = BluemClient({
            "environment": "test",
            "senderID": "S1212",
            "brandID": "ExampleMandate",
            "test_accessToken": "...",
            "merchantReturnURLBase": "https://example.com/return",
        })

        response = client.mandate(customer_id="1234", order_id="5678")
        if response.status:
            print(response.transaction_url)
        else:
            print(response.error_message)
        ```
    """

    def __init__(
        self,
        config: ConfigInput,
        transport: Optional[HttpTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Configuration mapping or ``BluemConfig``
            transport: Transport to send requests with
            http_client: ``httpx.Client`` for the default transport

        Raises:
            ConfigurationError: when the configuration is invalid
        """
        self.config: BluemConfig = load_config(config)
        self.transport = transport or HttpTransport(
            timeout=self.config.timeout,
            client=http_client,
        )
        logger.debug(
            "Bluem client ready",
            extra={"data": {
                "environment": self.config.environment.value,
                "sender_id": self.config.sender_id,
            }},
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "BluemClient":
        """Create a client from ``BLUEM_*`` environment variables."""
        return cls(BluemSettings().to_config(), **kwargs)

    # ========== Identifiers ==========

    def create_entrance_code(self, now: Optional[datetime] = None) -> str:
        return create_entrance_code(now)

    def create_mandate_id(self, order_id: str, customer_id: str, now: Optional[datetime] = None) -> str:
        return create_mandate_id(order_id, customer_id, self.config.sender_id, now=now)

    def create_payment_transaction_id(self, debtor_reference: str, now: Optional[datetime] = None) -> str:
        return create_payment_transaction_id(debtor_reference, now=now)

    def create_identity_transaction_id(self, debtor_reference: str, now: Optional[datetime] = None) -> str:
        return create_identity_transaction_id(debtor_reference, now=now)

    # ========== Contexts ==========

    def get_context(self, name: str) -> TransactionContext:
        return get_context(name, self.config.local_instrument_code)

    def retrieve_bic_codes_for_context(self, name: str) -> list[str]:
        """BIC codes that can be preselected for a family."""
        return self.get_context(name).bic_codes

    def retrieve_bics_for_context(self, name: str) -> list[BankIssuer]:
        return list(self.get_context(name).issuers)

    def get_identity_request_types(self) -> list[str]:
        return get_identity_request_types()

    # ========== Mandates ==========

    def create_mandate_request(
        self,
        customer_id: str,
        order_id: str,
        mandate_id: Optional[str] = None,
        **options: Any,
    ) -> EMandateTransactionRequest:
        """Build an e-mandate request without sending it."""
        return EMandateTransactionRequest(
            self.config,
            customer_id=customer_id,
            order_id=order_id,
            mandate_id=mandate_id,
            **options,
        )

    def mandate(
        self,
        customer_id: str,
        order_id: str,
        mandate_id: Optional[str] = None,
        **options: Any,
    ) -> ClassifiedResponse:
        """Create an e-mandate and return the provider's answer."""
        return self.perform_request(
            self.create_mandate_request(customer_id, order_id, mandate_id, **options)
        )

    def mandate_status(self, mandate_id: str, entrance_code: str) -> ClassifiedResponse:
        return self.perform_request(
            EMandateStatusRequest(self.config, mandate_id, entrance_code=entrance_code)
        )

    def get_maximum_amount_from_transaction_response(
        self,
        response: Union[ClassifiedResponse, None],
    ) -> MaximumAmount:
        """Maximum amount from a mandate status, or zero when there is none."""
        if isinstance(response, MandateStatusResponse):
            return response.maximum_amount()
        return MaximumAmount()

    # ========== Payments ==========

    def create_payment_request(
        self,
        description: str,
        debtor_reference: str,
        amount: Union[Decimal, float, int, str],
        due_date_time: Optional[datetime] = None,
        currency: str = DEFAULT_CURRENCY,
        entrance_code: Optional[str] = None,
        debtor_return_url: Optional[str] = None,
        **options: Any,
    ) -> PaymentTransactionRequest:
        """Build a payment request without sending it."""
        return PaymentTransactionRequest(
            self.config,
            description=description,
            debtor_reference=debtor_reference,
            amount=amount,
            due_date_time=due_date_time,
            currency=currency,
            entrance_code=entrance_code,
            debtor_return_url=debtor_return_url,
            **options,
        )

    def payment(
        self,
        description: str,
        debtor_reference: str,
        amount: Union[Decimal, float, int, str],
        due_date_time: Optional[datetime] = None,
        currency: str = DEFAULT_CURRENCY,
        entrance_code: Optional[str] = None,
        **options: Any,
    ) -> ClassifiedResponse:
        return self.perform_request(
            self.create_payment_request(
                description,
                debtor_reference,
                amount,
                due_date_time=due_date_time,
                currency=currency,
                entrance_code=entrance_code,
                **options,
            )
        )

    def payment_status(self, transaction_id: str, entrance_code: str) -> ClassifiedResponse:
        return self.perform_request(
            PaymentStatusRequest(self.config, transaction_id, entrance_code=entrance_code)
        )

    # ========== Identity ==========

    def create_identity_request(
        self,
        request_category: Union[str, Iterable[str]],
        description: str,
        debtor_reference: str,
        debtor_return_url: Optional[str] = None,
        entrance_code: Optional[str] = None,
        **options: Any,
    ) -> IdentityTransactionRequest:
        return IdentityTransactionRequest(
            self.config,
            request_category=request_category,
            description=description,
            debtor_reference=debtor_reference,
            debtor_return_url=debtor_return_url,
            entrance_code=entrance_code,
            **options,
        )

    def identity(
        self,
        request_category: Union[str, Iterable[str]],
        description: str,
        debtor_reference: str,
        debtor_return_url: Optional[str] = None,
        entrance_code: Optional[str] = None,
        **options: Any,
    ) -> ClassifiedResponse:
        return self.perform_request(
            self.create_identity_request(
                request_category,
                description,
                debtor_reference,
                debtor_return_url=debtor_return_url,
                entrance_code=entrance_code,
                **options,
            )
        )

    def identity_status(self, transaction_id: str, entrance_code: str) -> ClassifiedResponse:
        return self.perform_request(
            IdentityStatusRequest(self.config, transaction_id, entrance_code=entrance_code)
        )

    # ========== IBAN-name check ==========

    def create_iban_name_check_request(
        self,
        iban: str,
        name: str,
        debtor_reference: str = "",
        **options: Any,
    ) -> IBANNameCheckRequest:
        return IBANNameCheckRequest(
            self.config,
            iban=iban,
            name=name,
            debtor_reference=debtor_reference,
            **options,
        )

    def iban_name_check(
        self,
        iban: str,
        name: str,
        debtor_reference: str = "",
        **options: Any,
    ) -> ClassifiedResponse:
        return self.perform_request(
            self.create_iban_name_check_request(iban, name, debtor_reference, **options)
        )

    # ========== Dispatch ==========

    def perform_request(self, request: TransactionRequest) -> ClassifiedResponse:
        """Validate, send and classify a request.

        The request is not sent when it fails schema validation. Validation,
        transport and provider failures all come back as ``ErrorResponse``.
        """
        code = request.transaction_code
        try:
            body = request.xml()
        except ValueError as e:
            # lxml refuses control characters and other non-XML text
            logger.warning(
                "Could not render %s request: %s",
                code.value,
                e,
                extra={"data": {"entrance_code": request.entrance_code}},
            )
            return ErrorResponse(
                message=ResponseMessages.SCHEMA_VIOLATION.format(details=e),
                kind=ErrorKind.VALIDATION,
                transaction_code=code,
                diagnostics=[str(e)],
            )

        validator = XmlSchemaValidator()
        if not validator.validate(request.context, body):
            error = ValidationError(
                ResponseMessages.SCHEMA_VIOLATION.format(details=validator.error_summary()),
                validator.error_details,
            )
            logger.warning(
                "Refusing to send invalid %s request",
                code.value,
                extra={"data": {"diagnostics": error.diagnostics}},
            )
            return ErrorResponse(
                message=error.message,
                kind=ErrorKind.VALIDATION,
                transaction_code=code,
                diagnostics=error.diagnostics,
            )

        headers = build_headers(code, self.config.sender_id)
        try:
            result = self.transport.post(request.request_url, body, headers)
        except TransportError as e:
            return ErrorResponse(
                message=ResponseMessages.TRANSPORT_FAILURE,
                kind=ErrorKind.TRANSPORT,
                transaction_code=code,
                diagnostics=[e.message],
            )

        return classify_response(code, result.status_code, result.body)

    # ========== Lifecycle ==========

    def close(self) -> None:
        """Close the transport."""
        self.transport.close()

    def __enter__(self) -> "BluemClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
