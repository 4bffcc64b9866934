"""Per-family transaction contexts.

A context bundles everything that differs between the product families:
the XSD schema, the URL segment, the XML element names and the banks that
can be preselected as debtor wallet. Contexts are immutable and cached, so
one instance per family is shared by every request.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from .codes import TransactionFamily
from .config import LocalInstrumentCode
from .models.errors import UnknownContextError

SCHEMA_DIR = Path(__file__).parent / "schemas"


@dataclass(frozen=True)
class BankIssuer:
    """A bank that can be preselected by its BIC."""

    bic: str
    name: str


@dataclass(frozen=True)
class TransactionContext:
    """Immutable description of one transaction family."""

    family: TransactionFamily
    schema_path: Path
    request_url_type: str
    interface_name: str
    error_element: str
    issuers: tuple[BankIssuer, ...] = ()
    debtor_wallet_element: Optional[str] = None
    local_instrument_code: Optional[LocalInstrumentCode] = None
    error_element_aliases: tuple[str, ...] = ()

    @property
    def bic_codes(self) -> list[str]:
        return [issuer.bic for issuer in self.issuers]

    @property
    def error_elements(self) -> tuple[str, ...]:
        """Error node names, preferred spelling first."""
        return (self.error_element, *self.error_element_aliases)

    def accepts_bic(self, bic: str) -> bool:
        return bic in self.bic_codes


_MANDATE_CORE_ISSUERS = (
    BankIssuer("ABNANL2A", "ABN AMRO"),
    BankIssuer("ASNBNL21", "ASN Bank"),
    BankIssuer("INGBNL2A", "ING"),
    BankIssuer("KNABNL2H", "Knab"),
    BankIssuer("RABONL2U", "Rabobank"),
    BankIssuer("RBRBNL21", "RegioBank"),
    BankIssuer("SNSBNL2A", "SNS"),
    BankIssuer("TRIONL2U", "Triodos Bank"),
)

_MANDATE_B2B_ISSUERS = (
    BankIssuer("ABNANL2A", "ABN AMRO"),
    BankIssuer("INGBNL2A", "ING"),
    BankIssuer("RABONL2U", "Rabobank"),
)

_PAYMENT_ISSUERS = (
    BankIssuer("ABNANL2A", "ABN AMRO"),
    BankIssuer("ASNBNL21", "ASN Bank"),
    BankIssuer("BUNQNL2A", "bunq"),
    BankIssuer("HANDNL2A", "Handelsbanken"),
    BankIssuer("INGBNL2A", "ING"),
    BankIssuer("KNABNL2H", "Knab"),
    BankIssuer("MOYONL21", "Moneyou"),
    BankIssuer("NTSBDEB1", "N26"),
    BankIssuer("RABONL2U", "Rabobank"),
    BankIssuer("RBRBNL21", "RegioBank"),
    BankIssuer("REVOLT21", "Revolut"),
    BankIssuer("SNSBNL2A", "SNS"),
    BankIssuer("TRIONL2U", "Triodos Bank"),
    BankIssuer("FVLBNL22", "Van Lanschot"),
    BankIssuer("BITSNL2A", "Yoursafe"),
)

_IDENTITY_ISSUERS = (
    BankIssuer("ABNANL2A", "ABN AMRO"),
    BankIssuer("ASNBNL21", "ASN Bank"),
    BankIssuer("BUNQNL2A", "bunq"),
    BankIssuer("INGBNL2A", "ING"),
    BankIssuer("RABONL2U", "Rabobank"),
    BankIssuer("RBRBNL21", "RegioBank"),
    BankIssuer("SNSBNL2A", "SNS"),
    BankIssuer("TRIONL2U", "Triodos Bank"),
)


@lru_cache(maxsize=None)
def _build_context(
    family: TransactionFamily,
    local_instrument_code: LocalInstrumentCode,
) -> TransactionContext:
    if family == TransactionFamily.MANDATES:
        return TransactionContext(
            family=family,
            schema_path=SCHEMA_DIR / "EMandate.xsd",
            request_url_type="mr",
            interface_name="EMandateInterface",
            error_element="EMandateErrorResponse",
            issuers=(
                _MANDATE_B2B_ISSUERS
                if local_instrument_code == LocalInstrumentCode.B2B
                else _MANDATE_CORE_ISSUERS
            ),
            debtor_wallet_element="INCASSOMACHTIGEN",
            local_instrument_code=local_instrument_code,
        )
    if family == TransactionFamily.PAYMENTS:
        return TransactionContext(
            family=family,
            schema_path=SCHEMA_DIR / "EPayment.xsd",
            request_url_type="pr",
            interface_name="EPaymentInterface",
            error_element="PaymentErrorResponse",
            issuers=_PAYMENT_ISSUERS,
            debtor_wallet_element="IDEAL",
        )
    if family == TransactionFamily.IDENTITY:
        return TransactionContext(
            family=family,
            schema_path=SCHEMA_DIR / "Identity.xsd",
            request_url_type="ir",
            interface_name="IdentityInterface",
            error_element="IdentityErrorResponse",
            error_element_aliases=("IDentityErrorResponse",),
            issuers=_IDENTITY_ISSUERS,
            debtor_wallet_element="IDIN",
        )
    if family == TransactionFamily.IBAN_CHECK:
        return TransactionContext(
            family=family,
            schema_path=SCHEMA_DIR / "IBANCheck.xsd",
            request_url_type="icr",
            interface_name="IBANCheckInterface",
            error_element="IBANCheckErrorResponse",
        )
    raise UnknownContextError(family, [f.value for f in TransactionFamily])


def get_context(
    name: Union[str, TransactionFamily],
    local_instrument_code: Union[str, LocalInstrumentCode] = LocalInstrumentCode.CORE,
) -> TransactionContext:
    """Look up the context for a family name.

    Args:
        name: ``Mandates``, ``Payments``, ``Identity`` or ``IBANCheck``
        local_instrument_code: Only relevant for mandates (``CORE`` or ``B2B``)

    Raises:
        UnknownContextError: for any other name
    """
    valid_names = [f.value for f in TransactionFamily]
    try:
        family = TransactionFamily(name)
    except ValueError:
        raise UnknownContextError(name, valid_names) from None
    try:
        code = LocalInstrumentCode(local_instrument_code)
    except ValueError:
        code = LocalInstrumentCode.CORE
    if family != TransactionFamily.MANDATES:
        # only mandates vary per instrument; keep one cached instance per family
        code = LocalInstrumentCode.CORE
    return _build_context(family, code)
