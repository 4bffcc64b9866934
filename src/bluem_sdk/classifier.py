"""Classification of provider answers into typed responses."""
from __future__ import annotations

import logging
from typing import Union

from lxml import etree

from .codes import RequestType, TransactionCode
from .constants import ResponseMessages
from .contexts import get_context
from .models.errors import InvalidTransactionTypeError, ProtocolError
from .models.responses import (
    RESPONSE_TYPES,
    BluemResponse,
    ErrorKind,
    ErrorResponse,
    find_error_node,
)

logger = logging.getLogger(__name__)

ClassifiedResponse = Union[BluemResponse, ErrorResponse]

_XML_PARSER = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_blank_text=True,
    huge_tree=False,
)


def parse_xml(body: Union[bytes, str]) -> etree._Element:
    """Parse untrusted XML without entity expansion or network access."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return etree.fromstring(body, _XML_PARSER)


def response_class_for(transaction_code: Union[TransactionCode, str]) -> type[BluemResponse]:
    """Success variant for a transaction code.

    Raises:
        InvalidTransactionTypeError: for codes outside the table
    """
    code = TransactionCode.parse(transaction_code)
    try:
        return RESPONSE_TYPES[code]
    except KeyError:
        raise InvalidTransactionTypeError(code.value) from None


def provider_error_message(
    transaction_code: Union[TransactionCode, str],
    root: etree._Element,
) -> str:
    """Error text from the family error node of an ``ErrorResponse`` document."""
    code = TransactionCode.parse(transaction_code)
    context = get_context(code.family)
    node = find_error_node(context, root)
    if node is None:
        return ""
    return (node.findtext("Error/ErrorMessage") or "").strip()


def _interpret(code: TransactionCode, status_code: int, body: bytes) -> BluemResponse:
    if status_code == 400:
        raise ProtocolError(ResponseMessages.BAD_REQUEST, status_code)
    if status_code == 401:
        raise ProtocolError(ResponseMessages.UNAUTHORIZED, status_code)
    if status_code == 500:
        raise ProtocolError(ResponseMessages.SERVER_ERROR, status_code)
    if status_code != 200:
        raise ProtocolError(
            ResponseMessages.UNEXPECTED_STATUS.format(status_code=status_code),
            status_code,
        )

    if not body or not body.strip():
        raise ProtocolError(ResponseMessages.EMPTY_RESPONSE, status_code)
    try:
        root = parse_xml(body)
    except etree.XMLSyntaxError as e:
        raise ProtocolError(
            ResponseMessages.UNPARSABLE_RESPONSE.format(details=e),
            status_code,
        ) from e

    if root.get("type") == RequestType.ERROR_RESPONSE.value:
        message = provider_error_message(code, root)
        raise ProtocolError(ResponseMessages.PROVIDER_ERROR.format(message=message), status_code)

    response = response_class_for(code).from_element(code, root)
    if not response.status:
        raise ProtocolError(
            ResponseMessages.PROVIDER_ERROR.format(message=response.error_message),
            status_code,
        )
    return response


def classify_response(
    transaction_code: Union[TransactionCode, str],
    status_code: int,
    body: Union[bytes, str, None],
) -> ClassifiedResponse:
    """Turn an HTTP status and body into a success variant or an ``ErrorResponse``.

    Provider and HTTP level failures come back as ``ErrorResponse``; only a
    transaction code missing from the internal tables raises.

    Args:
        transaction_code: Code the request was sent with
        status_code: HTTP status of the answer
        body: Raw answer body

    Raises:
        InvalidTransactionTypeError: for an unknown transaction code
    """
    code = TransactionCode.parse(transaction_code)
    if isinstance(body, str):
        body = body.encode("utf-8")

    try:
        response = _interpret(code, status_code, body or b"")
    except ProtocolError as e:
        logger.warning(
            "Provider answered %s with an error: %s",
            code.value,
            e.message,
            extra={"data": {"status_code": e.status_code}},
        )
        return ErrorResponse(
            message=e.message,
            kind=ErrorKind.PROTOCOL,
            transaction_code=code,
            http_status=e.status_code,
        )

    logger.info(
        "Provider accepted %s",
        code.value,
        extra={"data": {"entrance_code": response.entrance_code}},
    )
    return response
