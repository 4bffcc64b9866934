"""Base class for transaction requests."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, ClassVar, Mapping, Optional
from urllib.parse import urlencode

from lxml import etree

from ..codes import RequestType, TransactionCode, TransactionFamily
from ..config import BluemConfig, ExpectedReturnStatus
from ..constants import PROVIDER_TIMEZONE, DateFormats
from ..contexts import TransactionContext, get_context
from ..identifiers import create_entrance_code
from ..models.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Keys the provider accepts inside DebtorAdditionalData
ADDITIONAL_DATA_KEYS = (
    "EmailAddress",
    "TelephoneNumber",
    "CustomerNumber",
    "CustomerName",
    "AttentionOf",
    "Salutation",
    "CustomerAddressLine1",
    "CustomerAddressLine2",
)


def sub_element(
    parent: etree._Element,
    tag: str,
    text: Optional[str] = None,
    **attrs: str,
) -> etree._Element:
    """Append a child element with optional text and attributes."""
    element = etree.SubElement(parent, tag, **attrs)
    if text is not None:
        element.text = text
    return element


def _coerce_expected_return(value: Any) -> Optional[ExpectedReturnStatus]:
    if value is None or value == "":
        return None
    try:
        return ExpectedReturnStatus(value)
    except ValueError:
        return ExpectedReturnStatus.SUCCESS


class TransactionRequest(ABC):
    """A single request document for one transaction code.

    Subclasses declare the code, the request object element and fill in the
    body. All inputs are taken in ``__init__``; the rendered XML is computed
    once and reused, so a request never changes after it has been rendered.
    """

    family: ClassVar[TransactionFamily]
    transaction_code: ClassVar[TransactionCode]
    request_type: ClassVar[RequestType]
    request_object_name: ClassVar[str]

    def __init__(
        self,
        config: BluemConfig,
        entrance_code: Optional[str] = None,
        expected_return: Optional[ExpectedReturnStatus] = None,
        now: Optional[datetime] = None,
    ):
        self.config = config
        self.context: TransactionContext = get_context(
            self.family, config.local_instrument_code
        )
        self.created_at = (now or datetime.now(PROVIDER_TIMEZONE)).astimezone(PROVIDER_TIMEZONE)
        self.entrance_code = entrance_code or create_entrance_code(now)
        # expectedReturn is a test environment feature only
        self.expected_return: Optional[ExpectedReturnStatus] = None
        if config.is_test:
            self.expected_return = (
                _coerce_expected_return(expected_return) or config.expected_return_status
            )
        self._debtor_wallet_bic: Optional[str] = None
        self._additional_data: dict[str, str] = {}
        self._xml: Optional[bytes] = None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.transaction_code.value!r}, "
            f"entrance_code={self.entrance_code!r})"
        )

    @property
    def brand_id(self) -> str:
        return self.config.brand_id

    @property
    def request_path(self) -> str:
        """Submission path relative to the provider host."""
        return f"{self.context.request_url_type}/{self.transaction_code.value}"

    @property
    def request_url(self) -> str:
        """Full submission URL including the access token."""
        query = urlencode({"token": self.config.access_token})
        return f"{self.config.api_base_url}/{self.request_path}?{query}"

    # ------------------------------------------------------------------
    # Debtor wallet and additional data
    # ------------------------------------------------------------------

    def select_debtor_wallet(self, bic: str) -> "TransactionRequest":
        """Preselect the debtor's bank.

        Raises:
            ValueError: if the context does not offer this bank
        """
        if self.context.debtor_wallet_element is None:
            raise ValueError(f"{self.family.value} requests do not support a debtor wallet")
        if not self.context.accepts_bic(bic):
            raise ValueError(
                f"Invalid BIC code given: {bic!r}, should be one of: "
                + ", ".join(self.context.bic_codes)
            )
        self._ensure_mutable()
        self._debtor_wallet_bic = bic
        return self

    def add_additional_data(self, key: str, value: str) -> "TransactionRequest":
        if key not in ADDITIONAL_DATA_KEYS:
            raise ValueError(
                f"Key {key!r} is not a valid additional data key, should be one of: "
                + ", ".join(ADDITIONAL_DATA_KEYS)
            )
        self._ensure_mutable()
        self._additional_data[key] = value
        return self

    def _apply_options(
        self,
        debtor_wallet_bic: Optional[str],
        additional_data: Optional[Mapping[str, str]],
    ) -> None:
        if debtor_wallet_bic:
            self.select_debtor_wallet(debtor_wallet_bic)
        for key, value in (additional_data or {}).items():
            self.add_additional_data(key, value)

    def _derive_return_url(self, parameter: str, value: str) -> str:
        base = self.config.merchant_return_url_base
        if not base:
            raise ConfigurationError(
                "No return URL given and merchantReturnURLBase is not configured"
            )
        return f"{base}?{urlencode({parameter: value})}"

    def _ensure_mutable(self) -> None:
        if self._xml is not None:
            raise RuntimeError("Request has already been rendered")

    def _append_additional_data(self, parent: etree._Element) -> None:
        if not self._additional_data:
            return
        data = sub_element(parent, "DebtorAdditionalData")
        # keep the provider's key order regardless of insertion order
        for key in ADDITIONAL_DATA_KEYS:
            if key in self._additional_data:
                sub_element(data, key, self._additional_data[key])

    def _append_debtor_wallet(self, parent: etree._Element) -> None:
        if not self._debtor_wallet_bic:
            return
        wallet = sub_element(parent, "DebtorWallet")
        scheme = sub_element(wallet, self.context.debtor_wallet_element)
        sub_element(scheme, "BIC", self._debtor_wallet_bic)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def request_object_attributes(self) -> dict[str, str]:
        """Extra attributes on the request object element."""
        return {}

    @abstractmethod
    def build_body(self, request_object: etree._Element) -> None:
        """Append the operation specific children to the request object."""

    def build_element(self) -> etree._Element:
        interface = etree.Element(
            self.context.interface_name,
            type=self.request_type.value,
            mode="direct",
            senderID=self.config.sender_id,
            version="1.0",
            createDateTime=self.created_at.strftime(DateFormats.CREATE_DATE_TIME),
            messageCount="1",
        )
        request_object = sub_element(
            interface, self.request_object_name, entranceCode=self.entrance_code
        )
        if self.expected_return is not None:
            request_object.set("expectedReturn", self.expected_return.value)
        for name, value in self.request_object_attributes().items():
            request_object.set(name, value)
        self.build_body(request_object)
        return interface

    def xml(self) -> bytes:
        """The UTF-8 encoded request document."""
        if self._xml is None:
            self._xml = etree.tostring(
                self.build_element(),
                xml_declaration=True,
                encoding="UTF-8",
            )
            logger.debug(
                "Rendered %s request",
                self.transaction_code.value,
                extra={"data": {"entrance_code": self.entrance_code}},
            )
        return self._xml

    def xml_string(self) -> str:
        return self.xml().decode("utf-8")

    def to_dict(self) -> dict[str, Any]:
        return {
            "transaction_code": self.transaction_code.value,
            "entrance_code": self.entrance_code,
            "request_path": self.request_path,
        }
