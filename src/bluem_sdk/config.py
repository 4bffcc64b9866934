"""Configuration surface for the Bluem integration.

``load_config`` is the single entry point: it takes an untyped mapping (or
attribute bag) and returns a fully validated, immutable ``BluemConfig``, or
raises ``ConfigurationError`` carrying every validation failure at once.
"""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pydantic import ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_E_MANDATE_REASON,
    DEFAULT_LANGUAGE,
    MERCHANT_SUB_ID,
    STATIC_MERCHANT_ID,
    ProviderHosts,
    Timeouts,
)
from .models.base import BluemModel
from .models.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Provider environment."""

    TEST = "test"
    ACCEPTANCE = "acc"
    PRODUCTION = "prod"

    @property
    def host(self) -> str:
        return {
            Environment.TEST: ProviderHosts.TEST,
            Environment.ACCEPTANCE: ProviderHosts.ACCEPTANCE,
            Environment.PRODUCTION: ProviderHosts.PRODUCTION,
        }[self]


class LocalInstrumentCode(str, Enum):
    """Direct debit scheme for e-mandates."""

    CORE = "CORE"
    B2B = "B2B"


class ExpectedReturnStatus(str, Enum):
    """Outcome the test environment should simulate."""

    NONE = "none"
    SUCCESS = "success"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    FAILURE = "failure"
    OPEN = "open"
    PENDING = "pending"


class SequenceType(str, Enum):
    """Mandate sequence type: recurring or one-off."""

    RECURRING = "RCUR"
    ONE_OFF = "OOFF"


class BluemConfig(BluemModel):
    """Validated integration configuration.

    Field order matters: validators further down read ``environment``
    from the already validated data.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    environment: Environment
    sender_id: str = Field(alias="senderID")
    brand_id: str = Field(alias="brandID")
    test_access_token: Optional[str] = Field(default=None, alias="test_accessToken")
    production_access_token: Optional[str] = Field(
        default=None, alias="production_accessToken"
    )
    merchant_id: str = Field(default="", alias="merchantID", validate_default=True)
    merchant_sub_id: str = MERCHANT_SUB_ID
    local_instrument_code: LocalInstrumentCode = Field(
        default=LocalInstrumentCode.CORE, alias="localInstrumentCode"
    )
    expected_return_status: Optional[ExpectedReturnStatus] = Field(
        default=None, alias="expectedReturnStatus"
    )
    merchant_return_url_base: Optional[str] = Field(default=None, alias="merchantReturnURLBase")
    e_mandate_reason: str = Field(default=DEFAULT_E_MANDATE_REASON, alias="eMandateReason")
    identity_brand_id: Optional[str] = Field(default=None, alias="IDINBrandID")
    sequence_type: SequenceType = SequenceType.RECURRING
    language: str = DEFAULT_LANGUAGE
    base_url: Optional[str] = None
    timeout: float = Timeouts.HTTP_DEFAULT
    webhook_certificate_path: Optional[Path] = None

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: Any) -> Any:
        valid = [e.value for e in Environment]
        if isinstance(v, Environment):
            return v
        if v not in valid:
            raise ValueError("Invalid environment setting, should be either 'test', 'acc' or 'prod'")
        return v

    @field_validator("sender_id", mode="before")
    @classmethod
    def validate_sender_id(cls, v: Any) -> Any:
        if v is None or v == "":
            raise ValueError("senderID cannot be empty")
        if not isinstance(v, str) or not v.startswith("S"):
            raise ValueError("senderID always starts with an S followed by digits")
        return v

    @field_validator("brand_id", mode="before")
    @classmethod
    def validate_brand_id(cls, v: Any) -> Any:
        if v is None or v == "":
            raise ValueError("brandID not set")
        return v

    @field_validator("merchant_id", mode="before")
    @classmethod
    def select_merchant_id(cls, v: Any, info: ValidationInfo) -> Any:
        # the test environment always runs under the provider's own merchant
        if info.data.get("environment") == Environment.TEST:
            return STATIC_MERCHANT_ID
        return v or ""

    @field_validator("merchant_sub_id", mode="before")
    @classmethod
    def force_merchant_sub_id(cls, v: Any) -> str:
        return MERCHANT_SUB_ID

    @field_validator("local_instrument_code", mode="before")
    @classmethod
    def default_local_instrument_code(cls, v: Any) -> Any:
        if isinstance(v, LocalInstrumentCode):
            return v
        if v not in [c.value for c in LocalInstrumentCode]:
            return LocalInstrumentCode.CORE
        return v

    @field_validator("expected_return_status", mode="before")
    @classmethod
    def coerce_expected_return_status(cls, v: Any, info: ValidationInfo) -> Any:
        if info.data.get("environment") != Environment.TEST:
            return None
        if v is None or v == "":
            return None
        if isinstance(v, ExpectedReturnStatus):
            return v
        if v not in [s.value for s in ExpectedReturnStatus]:
            logger.debug("Unknown expected return status %r, using 'success'", v)
            return ExpectedReturnStatus.SUCCESS
        return v

    @model_validator(mode="after")
    def validate_access_tokens(self) -> "BluemConfig":
        if self.environment == Environment.TEST and not self.test_access_token:
            raise ValueError("test_accessToken not set correctly")
        if self.environment == Environment.PRODUCTION and not self.production_access_token:
            raise ValueError("production_accessToken not set correctly")
        return self

    @property
    def access_token(self) -> str:
        """Token for the active environment.

        The acceptance environment uses the production token.
        """
        if self.environment == Environment.TEST:
            return self.test_access_token or ""
        return self.production_access_token or ""

    @property
    def api_base_url(self) -> str:
        return (self.base_url or self.environment.host).rstrip("/")

    @property
    def is_test(self) -> bool:
        return self.environment == Environment.TEST


ConfigInput = Union[BluemConfig, Mapping[str, Any], Any]


def _format_errors(exc: PydanticValidationError) -> list[str]:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "config"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append(f"{location}: {message}")
    return errors


def load_config(data: Optional[ConfigInput]) -> BluemConfig:
    """Validate raw configuration input.

    Args:
        data: A ``BluemConfig``, a mapping, or any object whose attributes
            hold the configuration values

    Returns:
        The validated configuration

    Raises:
        ConfigurationError: listing every failed field
    """
    if data is None:
        raise ConfigurationError("No configuration given to instantiate the integration")
    if isinstance(data, BluemConfig):
        return data
    if not isinstance(data, Mapping):
        data = vars(data)

    try:
        return BluemConfig.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = _format_errors(e)
        logger.warning("Rejected Bluem configuration", extra={"data": {"errors": errors}})
        raise ConfigurationError("Invalid Bluem configuration", errors=errors) from e


class BluemSettings(BaseSettings):
    """Configuration read from ``BLUEM_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BLUEM_",
        env_file=".env",
        extra="ignore",
    )

    environment: str = Environment.TEST.value
    sender_id: str = ""
    brand_id: str = ""
    test_access_token: Optional[str] = None
    production_access_token: Optional[str] = None
    merchant_id: Optional[str] = None
    local_instrument_code: Optional[str] = None
    expected_return_status: Optional[str] = None
    merchant_return_url_base: Optional[str] = None
    e_mandate_reason: Optional[str] = None
    identity_brand_id: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = Timeouts.HTTP_DEFAULT
    webhook_certificate_path: Optional[Path] = None

    def to_config(self) -> BluemConfig:
        return load_config(self.model_dump(exclude_none=True))
