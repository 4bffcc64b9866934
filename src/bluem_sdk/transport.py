"""HTTP transport for request submission."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional, Union

import httpx

from .codes import TransactionCode
from .constants import DateFormats, Headers, Timeouts
from .logging import log_request, log_response, mask_url
from .models.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Raw outcome of a submitted request."""

    status_code: int
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def build_headers(
    transaction_code: Union[TransactionCode, str],
    sender_id: str,
    now: Optional[datetime] = None,
) -> dict[str, str]:
    """Headers the provider requires on every request."""
    code = TransactionCode.parse(transaction_code).value
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    # filename timestamp is UTC, like x-ttrs-date
    timestamp = now.strftime(DateFormats.FILENAME_TIMESTAMP)
    return {
        Headers.CONTENT_TYPE: f"application/xml; type={code}; charset=UTF-8",
        Headers.DATE: format_datetime(now, usegmt=True),
        Headers.FILES_COUNT: "1",
        Headers.FILENAME: f"{code}-{sender_id}-{Headers.FILENAME_INFIX}-{timestamp}000.xml",
        Headers.ALLOW_ORIGIN: "*",
    }


class HttpTransport:
    """Send request documents with a synchronous ``httpx.Client``.

    Every ``httpx.HTTPError`` (connection failures, timeouts, protocol
    errors) surfaces as ``TransportError``. Nothing is retried.
    """

    def __init__(
        self,
        timeout: float = Timeouts.HTTP_DEFAULT,
        client: Optional[httpx.Client] = None,
    ):
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def post(self, url: str, body: bytes, headers: dict[str, str]) -> TransportResponse:
        log_request(logger, "POST", url, headers, body, transaction_code=_code_from(headers))
        started = time.monotonic()
        try:
            response = self._client.post(url, content=body, headers=headers, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.warning(
                "Request to %s failed: %s",
                mask_url(url),
                type(e).__name__,
                extra={"data": {"error": str(e)}},
            )
            raise TransportError(f"{type(e).__name__}: {e}", url=mask_url(url)) from e

        duration_ms = (time.monotonic() - started) * 1000
        log_response(logger, response.status_code, response.content, duration_ms)
        return TransportResponse(status_code=response.status_code, body=response.content)

    def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _code_from(headers: dict[str, str]) -> Optional[str]:
    content_type = headers.get(Headers.CONTENT_TYPE, "")
    for part in content_type.split(";"):
        name, _, value = part.strip().partition("=")
        if name == "type":
            return value
    return None
