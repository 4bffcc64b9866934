"""Error models for Bluem SDK.

Only ``ConfigurationError`` (and its subclasses) is allowed to escape the
public client API. The other exceptions are raised internally and converted
into typed results at the boundary: ``ErrorResponse`` for request submission
and a rejected ``WebhookResult`` for inbound notifications.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence


class BluemError(Exception):
    """Base exception for Bluem SDK."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "BLUEM_ERROR"
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(BluemError):
    """Invalid or missing configuration.

    Raised at construction or build time and never downgraded into a
    response value.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Sequence[str]] = None,
        code: str = "CONFIGURATION_ERROR",
    ):
        self.errors = list(errors or [])
        super().__init__(message, code=code, details={"errors": self.errors})

    def __str__(self) -> str:
        if not self.errors:
            return super().__str__()
        return f"{super().__str__()}: " + "; ".join(self.errors)


class InvalidTransactionTypeError(ConfigurationError):
    """A transaction code is missing from one of the internal code tables."""

    def __init__(self, transaction_code: Any):
        super().__init__(
            f"Invalid transaction type requested: {transaction_code!r}",
            code="INVALID_TRANSACTION_TYPE",
        )
        self.transaction_code = transaction_code


class UnknownContextError(ConfigurationError):
    """Unknown transaction family name."""

    def __init__(self, name: Any, valid_names: Sequence[str]):
        super().__init__(
            f"Invalid context requested: {name!r}, should be one of the following: "
            + ", ".join(valid_names),
            code="UNKNOWN_CONTEXT",
        )
        self.name = name


class SchemaNotFoundError(ConfigurationError):
    """The XSD schema referenced by a context does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Schema is missing: {path}", code="SCHEMA_NOT_FOUND")
        self.path = path


class ValidationError(BluemError):
    """A built request document does not conform to its schema."""

    def __init__(self, message: str, diagnostics: Optional[Sequence[str]] = None):
        self.diagnostics = list(diagnostics or [])
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"diagnostics": self.diagnostics},
        )


class TransportError(BluemError):
    """Network failure, timeout or any other failure to send a request."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message, code="TRANSPORT_ERROR", details={"url": url})
        self.url = url


class ProtocolError(BluemError):
    """The provider answered, but with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message,
            code="PROTOCOL_ERROR",
            details={"status_code": status_code},
        )
        self.status_code = status_code


class SignatureError(BluemError):
    """An inbound notification could not be authenticated or understood."""

    def __init__(self, message: str, reason: str = "invalid_signature"):
        super().__init__(message, code="SIGNATURE_ERROR", details={"reason": reason})
        self.reason = reason
