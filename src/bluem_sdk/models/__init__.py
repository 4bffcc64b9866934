"""Shared models and errors.

Response models live in ``bluem_sdk.models.responses``.
"""
from .base import BluemModel
from .errors import (
    BluemError,
    ConfigurationError,
    InvalidTransactionTypeError,
    ProtocolError,
    SchemaNotFoundError,
    SignatureError,
    TransportError,
    UnknownContextError,
    ValidationError,
)

__all__ = [
    "BluemError",
    "BluemModel",
    "ConfigurationError",
    "InvalidTransactionTypeError",
    "ProtocolError",
    "SchemaNotFoundError",
    "SignatureError",
    "TransportError",
    "UnknownContextError",
    "ValidationError",
]
