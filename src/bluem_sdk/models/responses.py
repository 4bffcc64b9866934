"""Typed responses.

A submitted request always ends in exactly one value: one of the success
variants below (one per family and operation) or an ``ErrorResponse``.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, ClassVar, Optional

from lxml import etree
from pydantic import Field

from ..codes import TransactionCode
from ..contexts import TransactionContext, get_context
from .base import BluemModel


class TransactionStatus(str, Enum):
    """Status the provider reports for a transaction."""

    NEW = "New"
    OPEN = "Open"
    PENDING = "Pending"
    PROCESSING = "Processing"
    SUCCESS = "Success"
    CANCELLED = "Cancelled"
    EXPIRED = "Expired"
    FAILURE = "Failure"
    UNKNOWN = "Unknown"

    @classmethod
    def _missing_(cls, value: object) -> "TransactionStatus":
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return cls.UNKNOWN


class ErrorKind(str, Enum):
    """Where a request went wrong."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"


class MaximumAmount(BluemModel):
    """Maximum collection amount agreed in a mandate."""

    amount: float = 0.0
    currency: str = "EUR"


def _find(root: etree._Element, tag: str) -> Optional[etree._Element]:
    if root.tag == tag:
        return root
    return next(root.iter(tag), None)


def find_error_node(context: TransactionContext, root: etree._Element) -> Optional[etree._Element]:
    """First family error node in the document, under any of its spellings."""
    for tag in context.error_elements:
        node = _find(root, tag)
        if node is not None:
            return node
    return None


def _text(element: Optional[etree._Element], path: str) -> Optional[str]:
    if element is None:
        return None
    value = element.findtext(path)
    if value is None:
        return None
    return value.strip()


def _decimal(value: Optional[str]) -> Optional[Decimal]:
    if not value:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


def _flatten(element: etree._Element, prefix: str = "") -> dict[str, str]:
    """Leaf texts keyed by slash separated path, e.g. ``NameResponse/LegalLastName``."""
    result: dict[str, str] = {}
    for child in element:
        if not isinstance(child.tag, str):
            continue
        path = f"{prefix}{child.tag}"
        if len(child):
            result.update(_flatten(child, path + "/"))
        elif child.text and child.text.strip():
            result[path] = child.text.strip()
    return result


def _status(value: Optional[str]) -> Optional[TransactionStatus]:
    return TransactionStatus(value) if value else None


class BluemResponse(BluemModel):
    """Base of all success variants.

    ``status`` is ``False`` whenever the family error node is present in
    the document, even if the envelope itself was a regular response.
    """

    primary_element: ClassVar[str]

    transaction_code: TransactionCode
    entrance_code: Optional[str] = None
    error_message: Optional[str] = None
    raw_xml: str = Field(default="", repr=False)

    @property
    def status(self) -> bool:
        return self.error_message is None

    @classmethod
    def from_element(
        cls,
        transaction_code: TransactionCode,
        root: etree._Element,
    ) -> "BluemResponse":
        context = get_context(transaction_code.family)
        primary = _find(root, cls.primary_element)
        error_node = find_error_node(context, root)
        error_message = None
        if error_node is not None:
            error_message = _text(error_node, "Error/ErrorMessage") or ""

        return cls.model_validate(
            {
                "transaction_code": transaction_code,
                "entrance_code": primary.get("entranceCode") if primary is not None else None,
                "error_message": error_message,
                "raw_xml": etree.tostring(root, encoding="unicode"),
                **cls.extract_fields(primary),
            }
        )

    @classmethod
    def extract_fields(cls, primary: Optional[etree._Element]) -> dict[str, Any]:
        """Family specific payload read from the primary element."""
        return {}


class MandateStatusResponse(BluemResponse):
    primary_element = "EMandateStatusUpdate"

    mandate_id: Optional[str] = None
    transaction_status: Optional[TransactionStatus] = None
    max_amount: Optional[Decimal] = None
    debtor_name: Optional[str] = None
    debtor_iban: Optional[str] = None
    debtor_bank_id: Optional[str] = None

    @classmethod
    def extract_fields(cls, primary: Optional[etree._Element]) -> dict[str, Any]:
        return {
            "mandate_id": _text(primary, "EMandateStatus/MandateID"),
            "transaction_status": _status(_text(primary, "EMandateStatus/Status")),
            "max_amount": _decimal(_text(primary, "EMandateStatus/AcceptanceReport/MaxAmount")),
            "debtor_name": _text(primary, "EMandateStatus/AcceptanceReport/DebtorAccountName"),
            "debtor_iban": _text(primary, "EMandateStatus/AcceptanceReport/DebtorIBAN"),
            "debtor_bank_id": _text(primary, "EMandateStatus/AcceptanceReport/DebtorBankID"),
        }

    def maximum_amount(self) -> MaximumAmount:
        if self.max_amount is None:
            return MaximumAmount()
        return MaximumAmount(amount=float(self.max_amount))


class MandateTransactionResponse(BluemResponse):
    primary_element = "EMandateTransactionResponse"

    transaction_url: Optional[str] = None
    mandate_id: Optional[str] = None
    transaction_id: Optional[str] = None

    @classmethod
    def extract_fields(cls, primary: Optional[etree._Element]) -> dict[str, Any]:
        return {
            "transaction_url": _text(primary, "TransactionURL"),
            "mandate_id": _text(primary, "MandateID"),
            "transaction_id": _text(primary, "TransactionID"),
        }


class PaymentStatusResponse(BluemResponse):
    primary_element = "PaymentStatusUpdate"

    transaction_id: Optional[str] = None
    transaction_status: Optional[TransactionStatus] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    debtor_reference: Optional[str] = None
    payment_method: Optional[str] = None

    @classmethod
    def extract_fields(cls, primary: Optional[etree._Element]) -> dict[str, Any]:
        method = None
        if primary is not None:
            details = primary.find("PaymentMethod")
            if details is not None and len(details):
                method = details[0].tag
        return {
            "transaction_id": _text(primary, "TransactionID"),
            "transaction_status": _status(_text(primary, "Status")),
            "amount": _decimal(_text(primary, "Amount")),
            "currency": _text(primary, "Currency"),
            "debtor_reference": _text(primary, "DebtorReference"),
            "payment_method": method,
        }


class PaymentTransactionResponse(BluemResponse):
    primary_element = "PaymentTransactionResponse"

    transaction_url: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_reference: Optional[str] = None

    @classmethod
    def extract_fields(cls, primary: Optional[etree._Element]) -> dict[str, Any]:
        return {
            "transaction_url": _text(primary, "TransactionURL"),
            "transaction_id": _text(primary, "TransactionID"),
            "payment_reference": _text(primary, "PaymentReference"),
        }


class IdentityStatusResponse(BluemResponse):
    primary_element = "IdentityStatusUpdate"

    transaction_id: Optional[str] = None
    transaction_status: Optional[TransactionStatus] = None
    identity_report: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def extract_fields(cls, primary: Optional[etree._Element]) -> dict[str, Any]:
        node = primary.find("IdentityReport") if primary is not None else None
        return {
            "transaction_id": _text(primary, "TransactionID"),
            "transaction_status": _status(_text(primary, "Status")),
            "identity_report": _flatten(node) if node is not None else {},
        }


class IdentityTransactionResponse(BluemResponse):
    primary_element = "IdentityTransactionResponse"

    transaction_url: Optional[str] = None
    transaction_id: Optional[str] = None

    @classmethod
    def extract_fields(cls, primary: Optional[etree._Element]) -> dict[str, Any]:
        return {
            "transaction_url": _text(primary, "TransactionURL"),
            "transaction_id": _text(primary, "TransactionID"),
        }


class IBANNameCheckResponse(BluemResponse):
    primary_element = "IBANCheckTransactionResponse"

    iban: Optional[str] = None
    assumed_name: Optional[str] = None
    iban_result: Optional[str] = None
    name_result: Optional[str] = None
    suggested_name: Optional[str] = None
    account_status: Optional[str] = None

    @classmethod
    def extract_fields(cls, primary: Optional[etree._Element]) -> dict[str, Any]:
        return {
            "iban": _text(primary, "IBAN"),
            "assumed_name": _text(primary, "AssumedName"),
            "iban_result": _text(primary, "IBANCheckResult/IBANResult"),
            "name_result": _text(primary, "IBANCheckResult/NameResult"),
            "suggested_name": _text(primary, "IBANCheckResult/SuggestedName"),
            "account_status": _text(primary, "AccountDetails/AccountStatus"),
        }


class ErrorResponse(BluemModel):
    """A request that did not produce a usable provider answer."""

    message: str
    kind: ErrorKind
    transaction_code: Optional[TransactionCode] = None
    http_status: Optional[int] = None
    diagnostics: list[str] = Field(default_factory=list)

    @property
    def status(self) -> bool:
        return False

    @property
    def error_message(self) -> str:
        return self.message


# Every transaction code maps to exactly one success variant
RESPONSE_TYPES: dict[TransactionCode, type[BluemResponse]] = {
    TransactionCode.MANDATE_STATUS: MandateStatusResponse,
    TransactionCode.MANDATE_STATUS_UPDATE: MandateStatusResponse,
    TransactionCode.MANDATE_TRANSACTION: MandateTransactionResponse,
    TransactionCode.MANDATE_TRANSACTION_RESPONSE: MandateTransactionResponse,
    TransactionCode.PAYMENT_STATUS_UPDATE: PaymentStatusResponse,
    TransactionCode.PAYMENT_STATUS: PaymentStatusResponse,
    TransactionCode.PAYMENT_TRANSACTION_RESPONSE: PaymentTransactionResponse,
    TransactionCode.PAYMENT_TRANSACTION: PaymentTransactionResponse,
    TransactionCode.IDENTITY_TRANSACTION: IdentityTransactionResponse,
    TransactionCode.IDENTITY_STATUS_UPDATE: IdentityStatusResponse,
    TransactionCode.IDENTITY_STATUS: IdentityStatusResponse,
    TransactionCode.IBAN_NAME_CHECK_RESPONSE: IBANNameCheckResponse,
    TransactionCode.IBAN_NAME_CHECK: IBANNameCheckResponse,
}

TransactionResponse = BluemResponse  # any success variant
