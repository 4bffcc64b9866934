"""E-mandate requests."""
from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional

from lxml import etree

from ..codes import RequestType, TransactionCode, TransactionFamily
from ..config import BluemConfig, ExpectedReturnStatus
from ..constants import MANDATE_ID_MAX_LENGTH
from ..identifiers import create_mandate_id
from .base import TransactionRequest, sub_element


class EMandateTransactionRequest(TransactionRequest):
    """Create a new e-mandate (``TRX``)."""

    family = TransactionFamily.MANDATES
    transaction_code = TransactionCode.MANDATE_TRANSACTION
    request_type = RequestType.TRANSACTION_REQUEST
    request_object_name = "EMandateTransactionRequest"

    def __init__(
        self,
        config: BluemConfig,
        customer_id: str,
        order_id: str,
        mandate_id: Optional[str] = None,
        merchant_return_url: Optional[str] = None,
        purchase_id: Optional[str] = None,
        debtor_wallet_bic: Optional[str] = None,
        additional_data: Optional[Mapping[str, str]] = None,
        entrance_code: Optional[str] = None,
        expected_return: Optional[ExpectedReturnStatus] = None,
        now: Optional[datetime] = None,
    ):
        if not customer_id:
            raise ValueError("Customer ID not set")
        if not order_id:
            raise ValueError("Order ID not set")
        super().__init__(config, entrance_code, expected_return, now)

        self.customer_id = str(customer_id)
        self.order_id = str(order_id)
        self.mandate_id = mandate_id or create_mandate_id(
            self.order_id, self.customer_id, config.sender_id, now=now
        )
        self.purchase_id = purchase_id or f"{self.customer_id}-{self.order_id}"[:MANDATE_ID_MAX_LENGTH]
        self.merchant_return_url = merchant_return_url or self._derive_return_url(
            "mandateID", self.mandate_id
        )
        self._apply_options(debtor_wallet_bic, additional_data)

    def request_object_attributes(self) -> dict[str, str]:
        return {
            "requestType": "Issuing",
            "localInstrumentCode": self.config.local_instrument_code.value,
            "merchantID": self.config.merchant_id,
            "merchantSubID": self.config.merchant_sub_id,
            "language": self.config.language,
            "sendOption": "none",
        }

    def build_body(self, request_object: etree._Element) -> None:
        sub_element(request_object, "MandateID", self.mandate_id)
        sub_element(
            request_object,
            "MerchantReturnURL",
            self.merchant_return_url,
            automaticRedirect="1",
        )
        sub_element(request_object, "SequenceType", self.config.sequence_type.value)
        sub_element(request_object, "EMandateReason", self.config.e_mandate_reason)
        sub_element(request_object, "DebtorReference", self.customer_id)
        sub_element(request_object, "PurchaseID", self.purchase_id)
        self._append_additional_data(request_object)
        self._append_debtor_wallet(request_object)


class EMandateStatusRequest(TransactionRequest):
    """Status of an existing e-mandate (``SRX``)."""

    family = TransactionFamily.MANDATES
    transaction_code = TransactionCode.MANDATE_STATUS
    request_type = RequestType.STATUS_REQUEST
    request_object_name = "EMandateStatusRequest"

    def __init__(
        self,
        config: BluemConfig,
        mandate_id: str,
        entrance_code: Optional[str] = None,
        expected_return: Optional[ExpectedReturnStatus] = None,
        now: Optional[datetime] = None,
    ):
        if not mandate_id:
            raise ValueError("Mandate ID not set")
        super().__init__(config, entrance_code, expected_return, now)
        self.mandate_id = mandate_id

    def build_body(self, request_object: etree._Element) -> None:
        sub_element(request_object, "MandateID", self.mandate_id)
