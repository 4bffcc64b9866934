"""
Pytest configuration and fixtures for Bluem SDK tests.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from lxml import etree
from signxml import XMLSigner

from bluem_sdk import BluemClient, load_config
from bluem_sdk.constants import PROVIDER_TIMEZONE


TEST_TOKEN = "secret-test-token"
PRODUCTION_TOKEN = "secret-production-token"

# Mock provider answers
MOCK_RESPONSES = {
    "mandate_transaction": b"""<?xml version="1.0" encoding="UTF-8"?>
<EMandateInterface type="TransactionResponse" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <EMandateTransactionResponse entranceCode="20240315103045123">
    <TransactionURL>https://test.viamijnbank.net/mandate/abc123</TransactionURL>
    <MandateID>1234202403155678</MandateID>
    <TransactionID>abc123</TransactionID>
  </EMandateTransactionResponse>
</EMandateInterface>""",
    "mandate_status": b"""<?xml version="1.0" encoding="UTF-8"?>
<EMandateInterface type="StatusUpdate" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <EMandateStatusUpdate entranceCode="20240315103045123">
    <EMandateStatus>
      <MandateID>1234202403155678</MandateID>
      <Status>Success</Status>
      <AcceptanceReport>
        <DebtorAccountName>J. Jansen</DebtorAccountName>
        <DebtorIBAN>NL91ABNA0417164300</DebtorIBAN>
        <DebtorBankID>ABNANL2A</DebtorBankID>
        <MaxAmount>250.00</MaxAmount>
      </AcceptanceReport>
    </EMandateStatus>
  </EMandateStatusUpdate>
</EMandateInterface>""",
    "mandate_error": b"""<?xml version="1.0" encoding="UTF-8"?>
<EMandateInterface type="ErrorResponse" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <EMandateErrorResponse>
    <Error>
      <ErrorCode>MANDATE_NOT_FOUND</ErrorCode>
      <ErrorMessage>Mandate could not be found</ErrorMessage>
    </Error>
  </EMandateErrorResponse>
</EMandateInterface>""",
    "mandate_status_with_error": b"""<?xml version="1.0" encoding="UTF-8"?>
<EMandateInterface type="StatusUpdate" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <EMandateErrorResponse>
    <Error>
      <ErrorMessage>Status not available</ErrorMessage>
    </Error>
  </EMandateErrorResponse>
</EMandateInterface>""",
    "payment_transaction": b"""<?xml version="1.0" encoding="UTF-8"?>
<EPaymentInterface type="TransactionResponse" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <PaymentTransactionResponse entranceCode="20240315103045123">
    <TransactionURL>https://test.viamijnbank.net/payment/xyz</TransactionURL>
    <TransactionID>xyz</TransactionID>
    <PaymentReference>customer-4220240315</PaymentReference>
  </PaymentTransactionResponse>
</EPaymentInterface>""",
    "payment_status": b"""<?xml version="1.0" encoding="UTF-8"?>
<EPaymentInterface type="StatusUpdate" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <PaymentStatusUpdate entranceCode="20240315103045123">
    <TransactionID>xyz</TransactionID>
    <Status>Success</Status>
    <Amount>10.00</Amount>
    <Currency>EUR</Currency>
    <DebtorReference>customer-42</DebtorReference>
    <PaymentMethod>
      <iDEAL>
        <IssuerID>INGBNL2A</IssuerID>
      </iDEAL>
    </PaymentMethod>
  </PaymentStatusUpdate>
</EPaymentInterface>""",
    "identity_transaction": b"""<?xml version="1.0" encoding="UTF-8"?>
<IdentityInterface type="TransactionResponse" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <IdentityTransactionResponse entranceCode="20240315103045123">
    <TransactionURL>https://test.viamijnbank.net/identity/idn1</TransactionURL>
    <TransactionID>idn1</TransactionID>
  </IdentityTransactionResponse>
</IdentityInterface>""",
    "identity_status": b"""<?xml version="1.0" encoding="UTF-8"?>
<IdentityInterface type="StatusUpdate" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <IdentityStatusUpdate entranceCode="20240315103045123">
    <TransactionID>idn1</TransactionID>
    <Status>Success</Status>
    <IdentityReport>
      <NameResponse>
        <LegalLastName>Jansen</LegalLastName>
        <Initials>J</Initials>
      </NameResponse>
      <AgeCheckResponse>
        <AgeOf18OrOlder>true</AgeOf18OrOlder>
      </AgeCheckResponse>
    </IdentityReport>
  </IdentityStatusUpdate>
</IdentityInterface>""",
    "iban_check": b"""<?xml version="1.0" encoding="UTF-8"?>
<IBANCheckInterface type="TransactionResponse" mode="direct" senderID="S1212" version="1.0" createDateTime="2024-03-15T11:30:45.000Z" messageCount="1">
  <IBANCheckTransactionResponse entranceCode="20240315103045123">
    <IBAN>NL91ABNA0417164300</IBAN>
    <AssumedName>J. Jansen</AssumedName>
    <IBANCheckResult>
      <IBANResult>KNOWN</IBANResult>
      <NameResult>MISTYPED</NameResult>
      <SuggestedName>J. Janssen</SuggestedName>
    </IBANCheckResult>
    <AccountDetails>
      <AccountStatus>ACTIVE</AccountStatus>
    </AccountDetails>
  </IBANCheckTransactionResponse>
</IBANCheckInterface>""",
}


@pytest.fixture
def mock_responses() -> dict[str, bytes]:
    """Mock provider answers."""
    return MOCK_RESPONSES


@pytest.fixture
def test_token() -> str:
    return TEST_TOKEN


@pytest.fixture
def production_token() -> str:
    return PRODUCTION_TOKEN


@pytest.fixture
def config_data() -> dict[str, Any]:
    """Raw test environment configuration, using the provider's key names."""
    return {
        "environment": "test",
        "senderID": "S1212",
        "brandID": "ExampleBrand",
        "test_accessToken": TEST_TOKEN,
        "merchantReturnURLBase": "https://example.com/return",
    }


@pytest.fixture
def config(config_data):
    return load_config(config_data)


@pytest.fixture
def prod_config(config_data):
    data = dict(config_data)
    data.update(
        environment="prod",
        production_accessToken=PRODUCTION_TOKEN,
        merchantID="0020012345",
    )
    return load_config(data)


@pytest.fixture
def fixed_now() -> datetime:
    """10:30:45.123 UTC, 11:30:45.123 in Amsterdam."""
    return datetime(2024, 3, 15, 10, 30, 45, 123000, tzinfo=timezone.utc)


@pytest.fixture
def client(config):
    """Client whose HTTP traffic is intercepted by ``httpx_mock``."""
    with BluemClient(config, http_client=httpx.Client()) as client:
        yield client


# =============================================================================
# Webhook signing material
# =============================================================================

def _self_signed(common_name: str) -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(PROVIDER_TIMEZONE)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")
    cert_pem = cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
    return key_pem, cert_pem


@pytest.fixture(scope="session")
def signing_material() -> tuple[str, str]:
    """Private key and certificate trusted by the verifier under test."""
    return _self_signed("webhook.bluem.test")


@pytest.fixture(scope="session")
def untrusted_signing_material() -> tuple[str, str]:
    return _self_signed("attacker.test")


def _sign(xml: bytes, key_pem: str, cert_pem: str) -> bytes:
    root = etree.fromstring(xml)
    signed = XMLSigner().sign(root, key=key_pem, cert=cert_pem)
    return etree.tostring(signed)


@pytest.fixture
def sign_xml(signing_material) -> Callable[[bytes], bytes]:
    key_pem, cert_pem = signing_material
    return lambda xml: _sign(xml, key_pem, cert_pem)


@pytest.fixture
def sign_xml_untrusted(untrusted_signing_material) -> Callable[[bytes], bytes]:
    key_pem, cert_pem = untrusted_signing_material
    return lambda xml: _sign(xml, key_pem, cert_pem)
