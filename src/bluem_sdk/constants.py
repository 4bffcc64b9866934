"""
Centralized constants for the Bluem SDK.

Provider-assigned values, wire formats and defaults live here so the
request builders, transport and classifier agree on a single source.

Usage:
    from bluem_sdk.constants import Timeouts, ProviderHosts, DateFormats
"""
from __future__ import annotations

from typing import Final
from zoneinfo import ZoneInfo


# =============================================================================
# Time
# =============================================================================

PROVIDER_TIMEZONE: Final[ZoneInfo] = ZoneInfo("Europe/Amsterdam")


class DateFormats:
    """strftime patterns used on the wire."""

    # createDateTime envelope attribute; the provider expects local time with a Z suffix
    CREATE_DATE_TIME: Final[str] = "%Y-%m-%dT%H:%M:%S.000Z"
    DUE_DATE_TIME: Final[str] = "%Y-%m-%dT%H:%M:%S.000Z"
    FILENAME_TIMESTAMP: Final[str] = "%Y%m%d%H%M%S"
    ID_TIMESTAMP: Final[str] = "%Y%m%d%H%M%S"
    ID_DATE: Final[str] = "%Y%m%d"


# =============================================================================
# Timeouts (seconds)
# =============================================================================

class Timeouts:
    """Network timeout configuration."""

    HTTP_DEFAULT: Final[float] = 30.0


# =============================================================================
# Provider
# =============================================================================

class ProviderHosts:
    """Base URLs per environment."""

    TEST: Final[str] = "https://test.viamijnbank.net"
    ACCEPTANCE: Final[str] = "https://acc.viamijnbank.net"
    PRODUCTION: Final[str] = "https://viamijnbank.net"


# Merchant ID used for every mandate in the test environment
STATIC_MERCHANT_ID: Final[str] = "0020000387"

# Assigned by the bank, always 0
MERCHANT_SUB_ID: Final[str] = "0"

# Sender whose mandate IDs are timestamp based instead of customer/order based
TIMESTAMP_MANDATE_SENDER_ID: Final[str] = "S1300"

MANDATE_ID_MAX_LENGTH: Final[int] = 35
TRANSACTION_REFERENCE_MAX_LENGTH: Final[int] = 28

DEFAULT_CURRENCY: Final[str] = "EUR"
DEFAULT_LANGUAGE: Final[str] = "nl"
DEFAULT_E_MANDATE_REASON: Final[str] = "Incasso machtiging"


class Headers:
    """Outbound request header names and fixed values."""

    CONTENT_TYPE: Final[str] = "Content-Type"
    DATE: Final[str] = "x-ttrs-date"
    FILES_COUNT: Final[str] = "x-ttrs-files-count"
    FILENAME: Final[str] = "x-ttrs-filename"
    ALLOW_ORIGIN: Final[str] = "Access-Control-Allow-Origin"

    FILENAME_INFIX: Final[str] = "BSP1"


class ResponseMessages:
    """Human readable messages carried by ``ErrorResponse``."""

    EMPTY_RESPONSE: Final[str] = "Error: Empty response returned"
    UNPARSABLE_RESPONSE: Final[str] = "Error: Could not create response object. More details: {details}"
    PROVIDER_ERROR: Final[str] = "Error: {message}"
    BAD_REQUEST: Final[str] = "Your request was not formed correctly."
    UNAUTHORIZED: Final[str] = "Unauthorized: check your access credentials."
    SERVER_ERROR: Final[str] = (
        "An unrecoverable error at the server side occurred while processing the request"
    )
    UNEXPECTED_STATUS: Final[str] = "Unexpected / erroneous response (code {status_code})"
    TRANSPORT_FAILURE: Final[str] = "HTTP Request Error"
    SCHEMA_VIOLATION: Final[str] = "Error: Request is not formed correctly. More details: {details}"


class LoggingConfig:
    """Logging-related constants."""

    MASK_PATTERN: Final[str] = "***"
    SENSITIVE_QUERY_PARAMS: Final[frozenset[str]] = frozenset({"token"})
    SENSITIVE_FIELDS: Final[frozenset[str]] = frozenset({
        "token",
        "access_token",
        "accessToken",
        "test_access_token",
        "test_accessToken",
        "production_access_token",
        "production_accessToken",
    })
    MAX_LOG_BODY_LENGTH: Final[int] = 2000
