"""Identity (iDIN) requests."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Union

from lxml import etree

from ..codes import RequestType, TransactionCode, TransactionFamily
from ..config import BluemConfig, ExpectedReturnStatus
from .base import TransactionRequest, sub_element

IDENTITY_REQUEST_TYPES = (
    "CustomerIDRequest",
    "CustomerIDLoginRequest",
    "NameRequest",
    "AddressRequest",
    "BirthDateRequest",
    "AgeCheckRequest",
    "GenderRequest",
    "TelephoneRequest",
    "EmailRequest",
)


def get_identity_request_types() -> list[str]:
    """All identity categories that can be requested."""
    return list(IDENTITY_REQUEST_TYPES)


class _IdentityRequest(TransactionRequest):
    family = TransactionFamily.IDENTITY

    @property
    def brand_id(self) -> str:
        return self.config.identity_brand_id or self.config.brand_id


class IdentityTransactionRequest(_IdentityRequest):
    """Start an identity request (``ITX``)."""

    transaction_code = TransactionCode.IDENTITY_TRANSACTION
    request_type = RequestType.TRANSACTION_REQUEST
    request_object_name = "IdentityTransactionRequest"

    def __init__(
        self,
        config: BluemConfig,
        request_category: Union[str, Iterable[str]],
        description: str,
        debtor_reference: str,
        debtor_return_url: Optional[str] = None,
        debtor_wallet_bic: Optional[str] = None,
        entrance_code: Optional[str] = None,
        expected_return: Optional[ExpectedReturnStatus] = None,
        now: Optional[datetime] = None,
    ):
        categories = [request_category] if isinstance(request_category, str) else list(request_category)
        if not categories:
            raise ValueError("At least one identity request category is required")
        unknown = [c for c in categories if c not in IDENTITY_REQUEST_TYPES]
        if unknown:
            raise ValueError(
                f"Invalid identity request categories: {', '.join(unknown)}; should be any of: "
                + ", ".join(IDENTITY_REQUEST_TYPES)
            )
        if not description:
            raise ValueError("Description not set")
        super().__init__(config, entrance_code, expected_return, now)

        self.request_categories = categories
        self.description = description
        self.debtor_reference = str(debtor_reference)
        self.debtor_return_url = debtor_return_url or self._derive_return_url(
            "entranceCode", self.entrance_code
        )
        self._apply_options(debtor_wallet_bic, None)

    def request_object_attributes(self) -> dict[str, str]:
        return {
            "brandID": self.brand_id,
            "language": self.config.language,
            "sendOption": "none",
        }

    def build_body(self, request_object: etree._Element) -> None:
        categories = sub_element(request_object, "RequestCategory")
        # the provider expects categories in its own fixed order
        for category in IDENTITY_REQUEST_TYPES:
            if category in self.request_categories:
                sub_element(categories, category, action="request")
        sub_element(request_object, "Description", self.description)
        sub_element(request_object, "DebtorReference", self.debtor_reference)
        sub_element(
            request_object,
            "DebtorReturnURL",
            self.debtor_return_url,
            automaticRedirect="1",
        )
        self._append_debtor_wallet(request_object)


class IdentityStatusRequest(_IdentityRequest):
    """Status of an identity request (``ISX``)."""

    transaction_code = TransactionCode.IDENTITY_STATUS
    request_type = RequestType.STATUS_REQUEST
    request_object_name = "IdentityStatusRequest"

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
