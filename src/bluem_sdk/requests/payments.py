"""Payment requests."""
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional, Union

from lxml import etree

from ..codes import RequestType, TransactionCode, TransactionFamily
from ..config import BluemConfig, ExpectedReturnStatus
from ..constants import DEFAULT_CURRENCY, PROVIDER_TIMEZONE, DateFormats
from ..identifiers import create_payment_transaction_id
from .base import TransactionRequest, sub_element

TWO_PLACES = Decimal("0.01")


def format_amount(amount: Union[Decimal, float, int, str]) -> str:
    """Render an amount with exactly two decimals."""
    return str(Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


class PaymentTransactionRequest(TransactionRequest):
    """Create a new payment (``PTX``)."""

    family = TransactionFamily.PAYMENTS
    transaction_code = TransactionCode.PAYMENT_TRANSACTION
    request_type = RequestType.TRANSACTION_REQUEST
    request_object_name = "PaymentTransactionRequest"

    def __init__(
        self,
        config: BluemConfig,
        description: str,
        debtor_reference: str,
        amount: Union[Decimal, float, int, str],
        due_date_time: Optional[datetime] = None,
        currency: str = DEFAULT_CURRENCY,
        transaction_id: Optional[str] = None,
        debtor_return_url: Optional[str] = None,
        debtor_wallet_bic: Optional[str] = None,
        additional_data: Optional[Mapping[str, str]] = None,
        entrance_code: Optional[str] = None,
        expected_return: Optional[ExpectedReturnStatus] = None,
        now: Optional[datetime] = None,
    ):
        if not description:
            raise ValueError("Description not set")
        if not debtor_reference:
            raise ValueError("Debtor reference not set")
        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValueError(f"Amount should be positive, got {amount}")
        super().__init__(config, entrance_code, expected_return, now)

        self.description = description
        self.debtor_reference = str(debtor_reference)
        self.amount = amount
        self.currency = currency or DEFAULT_CURRENCY
        self.due_date_time = due_date_time or (self.created_at + timedelta(days=1))
        self.transaction_id = transaction_id or create_payment_transaction_id(
            self.debtor_reference, now=now
        )
        self.debtor_return_url = debtor_return_url or self._derive_return_url(
            "entranceCode", self.entrance_code
        )
        self._apply_options(debtor_wallet_bic, additional_data)

    def request_object_attributes(self) -> dict[str, str]:
        return {
            "documentType": "PayRequest",
            "sendOption": "none",
            "language": self.config.language,
            "brandID": self.brand_id,
        }

    def build_body(self, request_object: etree._Element) -> None:
        due = self.due_date_time
        if due.tzinfo is not None:
            due = due.astimezone(PROVIDER_TIMEZONE)
        sub_element(request_object, "PaymentReference", self.transaction_id)
        sub_element(request_object, "DebtorReference", self.debtor_reference)
        sub_element(request_object, "Description", self.description)
        sub_element(request_object, "Currency", self.currency)
        sub_element(request_object, "Amount", format_amount(self.amount))
        sub_element(request_object, "DueDateTime", due.strftime(DateFormats.DUE_DATE_TIME))
        sub_element(
            request_object,
            "DebtorReturnURL",
            self.debtor_return_url,
            automaticRedirect="1",
        )
        self._append_additional_data(request_object)
        self._append_debtor_wallet(request_object)


class PaymentStatusRequest(TransactionRequest):
    """Status of an existing payment (``PSX``)."""

    family = TransactionFamily.PAYMENTS
    transaction_code = TransactionCode.PAYMENT_STATUS
    request_type = RequestType.STATUS_REQUEST
    request_object_name = "PaymentStatusRequest"

    def __init__(
        self,
        config: BluemConfig,
        transaction_id: str,
        entrance_code: Optional[str] = None,
        expected_return: Optional[ExpectedReturnStatus] = None,
        now: Optional[datetime] = None,
    ):
        if not transaction_id:
            raise ValueError("Transaction ID not set")
        super().__init__(config, entrance_code, expected_return, now)
        self.transaction_id = transaction_id

    def build_body(self, request_object: etree._Element) -> None:
        sub_element(request_object, "TransactionID", self.transaction_id)
