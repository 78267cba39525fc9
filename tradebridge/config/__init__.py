"""
Configuration management.

Loads exchange configuration from YAML, overlays credentials and logging
settings from the environment, and validates everything with Pydantic.

Example:
    >>> from tradebridge.config import load_config
    >>> config = load_config()
    >>> globitex = config.get_exchange("globitex")

Modules:
    loader: Configuration file loading utilities
    models: Pydantic models for configuration validation
"""

from tradebridge.config.loader import ConfigLoadError, ConfigLoader, load_config
from tradebridge.config.models import (
    # Enums
    LogFormat,
    LogLevel,
    # Exchange config
    ApiEndpoints,
    ConnectionSettings,
    Credentials,
    ExchangeConfig,
    ExchangeOptions,
    # Root config
    AppConfig,
    LoggingConfig,
)

__all__: list[str] = [
    # Loader
    "load_config",
    "ConfigLoader",
    "ConfigLoadError",
    # Enums
    "LogFormat",
    "LogLevel",
    # Exchange config
    "ApiEndpoints",
    "ConnectionSettings",
    "Credentials",
    "ExchangeConfig",
    "ExchangeOptions",
    # Root config
    "AppConfig",
    "LoggingConfig",
]
