"""
Logging utilities for the Bluem SDK with access token masking.

Usage:
    import logging
    from bluem_sdk.logging import log_request, log_response, mask_url

    logger = logging.getLogger(__name__)
    log_request(logger, "POST", request.request_url, headers, body)
    log_response(logger, 200, body, duration_ms)

Access tokens travel as the ``token`` query parameter, so every URL goes
through ``mask_url`` before it is logged.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .constants import LoggingConfig


def mask_value(value: str, show_chars: int = 4) -> str:
    """Mask a sensitive value, optionally showing first/last characters.

    Args:
        value: The value to mask
        show_chars: Number of characters to show at start and end

    Returns:
        Masked string
    """
    if not value or len(value) <= show_chars * 2:
        return LoggingConfig.MASK_PATTERN

    return f"{value[:show_chars]}...{value[-show_chars:]}"


def is_sensitive_key(key: str) -> bool:
    key_lower = key.lower().replace("-", "_")
    return key in LoggingConfig.SENSITIVE_FIELDS or "token" in key_lower


def mask_sensitive_data(data: Any, _depth: int = 0, _max_depth: int = 10) -> Any:
    """Recursively mask token-like values in dicts and lists."""
    if _depth > _max_depth:
        return data
    if isinstance(data, Mapping):
        return {
            key: LoggingConfig.MASK_PATTERN
            if is_sensitive_key(str(key))
            else mask_sensitive_data(value, _depth + 1, _max_depth)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, _depth + 1, _max_depth) for item in data)
    return data


def mask_url(url: str) -> str:
    """Replace sensitive query parameter values with the mask pattern."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (name, LoggingConfig.MASK_PATTERN if name in LoggingConfig.SENSITIVE_QUERY_PARAMS else value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query, safe="*")))


def mask_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Mask sensitive HTTP headers.

    Args:
        headers: HTTP headers dictionary

    Returns:
        Headers with sensitive values masked
    """
    sensitive_headers = {"authorization", "cookie", "set-cookie", "x-api-key"}

    result = {}
    for key, value in headers.items():
        if key.lower() in sensitive_headers or is_sensitive_key(key):
            result[key] = LoggingConfig.MASK_PATTERN
        else:
            result[key] = value
    return result


def _truncate_body(body: Union[bytes, str]) -> str:
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if len(body) > LoggingConfig.MAX_LOG_BODY_LENGTH:
        return body[: LoggingConfig.MAX_LOG_BODY_LENGTH] + "...[truncated]"
    return body


def log_request(
    logger: logging.Logger,
    method: str,
    url: str,
    headers: Optional[Mapping[str, str]] = None,
    body: Optional[Union[bytes, str]] = None,
    transaction_code: Optional[str] = None,
) -> None:
    """Log an outgoing HTTP request at DEBUG level."""
    masked_url = mask_url(url)
    log_data: dict[str, Any] = {
        "direction": "request",
        "method": method,
        "url": masked_url,
    }
    if transaction_code:
        log_data["transaction_code"] = transaction_code
    if headers:
        log_data["headers"] = mask_headers(headers)
    if body is not None:
        log_data["body"] = _truncate_body(body)

    logger.debug(f"HTTP {method} {masked_url}", extra={"data": log_data})


def log_response(
    logger: logging.Logger,
    status_code: int,
    body: Optional[Union[bytes, str]] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
) -> None:
    """Log an HTTP response; non-2xx answers are logged as warnings."""
    log_data: dict[str, Any] = {
        "direction": "response",
        "status_code": status_code,
    }
    if duration_ms is not None:
        log_data["duration_ms"] = duration_ms
    if error:
        log_data["error"] = error
    if body is not None:
        log_data["body"] = _truncate_body(body)

    level = logging.DEBUG if status_code < 400 else logging.WARNING

    message = f"HTTP {status_code}"
    if duration_ms is not None:
        message += f" ({duration_ms:.0f}ms)"

    logger.log(level, message, extra={"data": log_data})
