"""
YAML configuration loading.

Reads ``exchanges.yaml`` from a config directory, layers credentials and
logging settings from the environment on top, and validates the result
into an ``AppConfig``. Any problem surfaces as a ``ConfigLoadError`` that
names the offending file.

Environment:
    <EXCHANGE>_API_KEY / <EXCHANGE>_SECRET: Credentials for an exchange,
        upper-cased with dashes turned into underscores (GLOBITEX_API_KEY).
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL.
    LOG_FORMAT: json or text.

Example:
    >>> config = load_config("config")
    >>> config.get_enabled_exchanges()
    ['globitex']
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import yaml
from pydantic import ValidationError

from tradebridge.config.models import (
    AppConfig,
    ExchangeConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
)

EXCHANGES_FILE = "exchanges.yaml"

E = TypeVar("E", bound=Enum)


class ConfigLoadError(Exception):
    """
    Configuration could not be loaded.

    Attributes:
        message: What went wrong.
        file_path: File or directory involved, when known.
        cause: Underlying YAML, I/O or validation error.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.file_path = file_path
        self.cause = cause


def _env_choice(raw: Optional[str], enum_type: Type[E], default: E) -> E:
    if raw is None:
        return default
    for member in enum_type:
        if member.value.lower() == raw.strip().lower():
            return member
    return default


class ConfigLoader:
    """
    Builds an AppConfig from a config directory and an environment.

    Args:
        config_dir: Directory holding ``exchanges.yaml``.
        environ: Environment mapping; ``os.environ`` when omitted.

    Raises:
        ConfigLoadError: The directory is missing or is not a directory.
    """

    def __init__(
        self,
        config_dir: Path | str = "config",
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.config_dir = Path(config_dir)
        self.environ = os.environ if environ is None else environ
        if not self.config_dir.is_dir():
            reason = "is not a directory" if self.config_dir.exists() else "not found"
            raise ConfigLoadError(
                f"Configuration directory {reason}: {self.config_dir}",
                file_path=self.config_dir,
            )

    def _read(self, filename: str) -> Dict[str, Any]:
        path = self.config_dir / filename
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigLoadError(
                f"Configuration file not found: {path}", file_path=path, cause=e
            ) from e
        except OSError as e:
            raise ConfigLoadError(f"Cannot read {path}: {e}", file_path=path, cause=e) from e

        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigLoadError(
                f"Invalid YAML syntax in {path}: {e}", file_path=path, cause=e
            ) from e

        if document is None:
            raise ConfigLoadError(f"Configuration file is empty: {path}", file_path=path)
        if not isinstance(document, dict):
            raise ConfigLoadError(
                f"Expected a mapping at the top of {path}, got {type(document).__name__}",
                file_path=path,
            )
        return document

    def _credentials(self, name: str, section: Mapping[str, Any]) -> Dict[str, Any]:
        """YAML credentials with ``<NAME>_API_KEY`` / ``<NAME>_SECRET`` taking precedence."""
        prefix = name.upper().replace("-", "_")
        merged = dict(section)
        for field, suffix in (("api_key", "API_KEY"), ("secret", "SECRET")):
            value = self.environ.get(f"{prefix}_{suffix}")
            if value:
                merged[field] = value
        return merged

    def load_exchanges(self) -> Dict[str, ExchangeConfig]:
        """
        Validate every entry under ``exchanges:``.

        Raises:
            ConfigLoadError: An entry is invalid, or none are configured.
        """
        path = self.config_dir / EXCHANGES_FILE
        entries = self._read(EXCHANGES_FILE).get("exchanges") or {}

        exchanges: Dict[str, ExchangeConfig] = {}
        try:
            for name, entry in entries.items():
                entry = dict(entry or {})
                entry["credentials"] = self._credentials(name, entry.get("credentials") or {})
                exchanges[name] = ExchangeConfig.model_validate(entry)
        except (ValidationError, TypeError, AttributeError) as e:
            raise ConfigLoadError(
                f"Invalid exchange configuration: {e}", file_path=path, cause=e
            ) from e

        if not exchanges:
            raise ConfigLoadError(f"No exchanges configured in {EXCHANGES_FILE}", file_path=path)
        return exchanges

    def load_logging(self) -> LoggingConfig:
        """Logging settings from LOG_LEVEL / LOG_FORMAT; bad values fall back to INFO / json."""
        return LoggingConfig(
            level=_env_choice(self.environ.get("LOG_LEVEL"), LogLevel, LogLevel.INFO),
            format=_env_choice(self.environ.get("LOG_FORMAT"), LogFormat, LogFormat.JSON),
        )

    def load(self) -> AppConfig:
        exchanges = self.load_exchanges()
        try:
            return AppConfig(exchanges=exchanges, logging=self.load_logging())
        except ValidationError as e:
            raise ConfigLoadError(f"Configuration validation failed: {e}", cause=e) from e


def load_config(
    config_dir: Path | str = "config",
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Load and validate the application configuration.

    Example:
        >>> load_config().get_exchange("globitex").api.private
        'https://api.globitex.com/api/'
    """
    return ConfigLoader(config_dir, environ=environ).load()
