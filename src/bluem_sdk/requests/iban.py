"""IBAN-name check requests."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from lxml import etree

from ..codes import RequestType, TransactionCode, TransactionFamily
from ..config import BluemConfig, ExpectedReturnStatus
from .base import TransactionRequest, sub_element


class IBANNameCheckRequest(TransactionRequest):
    """Check whether an IBAN belongs to the given name (``INX``)."""

    family = TransactionFamily.IBAN_CHECK
    transaction_code = TransactionCode.IBAN_NAME_CHECK
    request_type = RequestType.TRANSACTION_REQUEST
    request_object_name = "IBANCheckTransactionRequest"

    def __init__(
        self,
        config: BluemConfig,
        iban: str,
        name: str,
        debtor_reference: str = "",
        entrance_code: Optional[str] = None,
        expected_return: Optional[ExpectedReturnStatus] = None,
        now: Optional[datetime] = None,
    ):
        if not iban:
            raise ValueError("IBAN not set")
        if not name:
            raise ValueError("Name not set")
        super().__init__(config, entrance_code, expected_return, now)
        self.iban = iban.replace(" ", "").upper()
        self.name = name
        self.debtor_reference = debtor_reference

    def build_body(self, request_object: etree._Element) -> None:
        sub_element(request_object, "IBAN", self.iban)
        sub_element(request_object, "AssumedName", self.name)
        if self.debtor_reference:
            sub_element(request_object, "DebtorReference", self.debtor_reference)
