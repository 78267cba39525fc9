"""
Pydantic models for application configuration.

This module defines all configuration models that are validated when loading
YAML configuration files. Every model is frozen: an adapter receives its
configuration once at construction and never mutates it, so two adapters
built with different credentials never share state.

Configuration files:
    - config/exchanges.yaml: Exchange endpoints, connection settings, options

Example:
    >>> from tradebridge.config.models import AppConfig
    >>> config = AppConfig(exchanges={"globitex": ExchangeConfig()})
    >>> config.get_exchange("globitex").options.default_type
    'spot'
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, SecretStr, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class LogFormat(str, Enum):
    """Logging format options."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Logging level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# EXCHANGE CONFIGURATION
# =============================================================================


class ApiEndpoints(BaseModel):
    """REST base URLs per API section."""

    model_config = {"frozen": True, "extra": "forbid"}

    public: Optional[str] = Field(
        default=None,
        description="Base URL for public (unsigned) endpoints",
    )
    private: Optional[str] = Field(
        default=None,
        description="Base URL for private (signed) endpoints",
    )

    def get(self, section: str) -> Optional[str]:
        """
        Get the base URL for an API section.

        Args:
            section: "public" or "private"

        Returns:
            Optional[str]: Base URL or None if not configured.
        """
        if section == "private":
            return self.private
        return self.public


class ConnectionSettings(BaseModel):
    """Connection settings for an exchange."""

    model_config = {"frozen": True, "extra": "forbid"}

    rate_limit_per_second: int = Field(
        default=10,
        description="Maximum REST requests per second",
        ge=1,
        le=100,
    )
    timeout_seconds: int = Field(
        default=10,
        description="Total request timeout",
        ge=1,
        le=120,
    )


class Credentials(BaseModel):
    """API credentials. Secrets are masked in repr and logs."""

    model_config = {"frozen": True, "extra": "forbid"}

    api_key: Optional[str] = Field(default=None, description="Public API key")
    secret: Optional[SecretStr] = Field(default=None, description="HMAC signing secret")

    @property
    def is_complete(self) -> bool:
        """Check if both key and secret are present."""
        return bool(self.api_key) and self.secret is not None and bool(
            self.secret.get_secret_value()
        )


class ExchangeOptions(BaseModel):
    """
    Adapter option context.

    Attributes:
        default_type: Market type used when nothing more specific applies.
        method_options: Per-operation overrides keyed by operation name; a
            value is either a market type string or a mapping holding
            ``type`` / ``defaultType``.
        fiat_currencies: Currency codes paid out by bank transfer.
        max_results: Default page size for history endpoints.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    default_type: str = Field(default="spot")
    method_options: Dict[str, Union[str, Dict[str, Any]]] = Field(default_factory=dict)
    fiat_currencies: List[str] = Field(default_factory=lambda: ["EUR", "USD"])
    max_results: int = Field(default=1000, ge=1, le=1000)

    @field_validator("fiat_currencies")
    @classmethod
    def upper_fiat_codes(cls, v: List[str]) -> List[str]:
        """Normalize currency codes to upper case."""
        return [code.upper() for code in v]


class ExchangeConfig(BaseModel):
    """Configuration for a single exchange adapter."""

    model_config = {"frozen": True, "extra": "forbid"}

    enabled: bool = Field(
        default=True,
        description="Whether this exchange is enabled",
    )
    api: ApiEndpoints = Field(
        default_factory=ApiEndpoints,
        description="REST endpoint configuration",
    )
    connection: ConnectionSettings = Field(
        default_factory=ConnectionSettings,
        description="Connection settings",
    )
    credentials: Credentials = Field(
        default_factory=Credentials,
        description="API credentials",
    )
    options: ExchangeOptions = Field(
        default_factory=ExchangeOptions,
        description="Adapter options",
    )


# =============================================================================
# LOGGING
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: LogLevel = Field(default=LogLevel.INFO)
    format: LogFormat = Field(default=LogFormat.JSON)


# =============================================================================
# ROOT CONFIGURATION
# =============================================================================


class AppConfig(BaseModel):
    """
    Root application configuration.

    Attributes:
        exchanges: Exchange configurations keyed by adapter id.
        logging: Logging settings.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    exchanges: Dict[str, ExchangeConfig] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get_exchange(self, name: str) -> Optional[ExchangeConfig]:
        """
        Get configuration for a specific exchange.

        Args:
            name: Exchange name (e.g., "globitex")

        Returns:
            Optional[ExchangeConfig]: Exchange config or None if not found.
        """
        return self.exchanges.get(name)

    def get_enabled_exchanges(self) -> List[str]:
        """Get list of enabled exchange names."""
        return [name for name, cfg in self.exchanges.items() if cfg.enabled]
