"""Verification of inbound provider notifications.

The provider POSTs signed XML status updates. A notification is only
accepted when its XML signature verifies against a trusted certificate;
an empty POST is the provider's liveness check and is accepted as is.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from cryptography import x509
from lxml import etree
from signxml import XMLVerifier
from signxml.exceptions import SignXMLException

from .classifier import parse_xml
from .codes import TransactionCode, TransactionFamily
from .config import BluemConfig, Environment
from .contexts import get_context
from .models.errors import ConfigurationError, SignatureError
from .models.responses import PaymentStatusResponse
from .models.webhook import VerifiedWebhook, WebhookResult

logger = logging.getLogger(__name__)

CertificateMapping = Mapping[Union[Environment, str], Union[str, Path]]


def load_certificate(path: Union[str, Path]) -> str:
    """Read and check a PEM certificate.

    Raises:
        ConfigurationError: if the file is missing or not a PEM certificate
    """
    path = Path(path)
    try:
        pem = path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"Webhook certificate could not be read: {path}") from e
    try:
        x509.load_pem_x509_certificate(pem)
    except ValueError as e:
        raise ConfigurationError(f"Webhook certificate is not a valid PEM certificate: {path}") from e
    return pem.decode("ascii")


class WebhookVerifier:
    """Authenticate notifications against one trusted certificate."""

    def __init__(self, certificate: Union[str, bytes]):
        if isinstance(certificate, bytes):
            certificate = certificate.decode("ascii")
        self.certificate = certificate

    @classmethod
    def from_config(
        cls,
        config: BluemConfig,
        certificates: Optional[CertificateMapping] = None,
    ) -> "WebhookVerifier":
        """Pick the certificate for the configured environment.

        Lookup order: ``certificates[environment]``, then
        ``config.webhook_certificate_path``.

        Raises:
            ConfigurationError: if neither names a certificate, or the file is unusable
        """
        path: Optional[Union[str, Path]] = None
        if certificates:
            path = certificates.get(config.environment) or certificates.get(config.environment.value)
        if path is None:
            path = config.webhook_certificate_path
        if path is None:
            raise ConfigurationError(
                f"No webhook certificate configured for environment {config.environment.value!r}"
            )
        logger.debug("Using webhook certificate %s", path)
        return cls(load_certificate(path))

    def verify(self, body: Union[bytes, str, None], method: str = "POST") -> WebhookResult:
        """Verify one notification.

        Never raises for bad input: every failure becomes a rejected result
        with ``http_status`` 400 and no payload.
        """
        try:
            return self._verify(body, method)
        except SignatureError as e:
            logger.warning("Rejected webhook: %s", e.message, extra={"data": {"reason": e.reason}})
            return WebhookResult.reject(e.message)

    def _verify(self, body: Union[bytes, str, None], method: str) -> WebhookResult:
        if method.upper() != "POST":
            raise SignatureError(f"Method {method} not allowed", reason="bad_request")

        if isinstance(body, str):
            body = body.encode("utf-8")
        if not body:
            logger.debug("Empty webhook body, answering liveness check")
            return WebhookResult.accept()

        try:
            parse_xml(body)
        except etree.XMLSyntaxError as e:
            raise SignatureError(f"Malformed XML: {e}", reason="malformed_xml") from e

        try:
            # only the signed part of the document is used from here on
            signed = XMLVerifier().verify(body, x509_cert=self.certificate).signed_xml
        except (SignXMLException, etree.LxmlError, ValueError) as e:
            raise SignatureError(f"Invalid signature: {e}", reason="invalid_signature") from e

        return WebhookResult.accept(self._extract_payload(signed))

    def _extract_payload(self, root: etree._Element) -> VerifiedWebhook:
        context = get_context(TransactionFamily.PAYMENTS)
        interface = root if root.tag == context.interface_name else root.find(context.interface_name)
        if interface is None or interface.find("PaymentStatusUpdate") is None:
            raise SignatureError("Unrecognized payload shape", reason="unsupported_payload")

        code = TransactionCode.PAYMENT_STATUS_UPDATE
        status_update = PaymentStatusResponse.from_element(code, interface)
        logger.info(
            "Verified payment status update",
            extra={"data": {"entrance_code": status_update.entrance_code}},
        )
        return VerifiedWebhook(
            family=TransactionFamily.PAYMENTS,
            transaction_code=code,
            status_update=status_update,
        )
