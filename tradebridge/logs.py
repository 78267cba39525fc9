"""
Structured logging setup.

Every module logs through ``structlog.get_logger(__name__)`` with snake_case
event names and keyword context. This module wires structlog to the standard
library once at application start-up.

Example:
    >>> from tradebridge.config import load_config
    >>> from tradebridge.logs import setup_logging
    >>> setup_logging(load_config().logging)
"""

import logging
from typing import Optional

import structlog

from tradebridge.config.models import LogFormat, LoggingConfig


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        config: Logging settings (default: INFO level, JSON output).
    """
    config = config or LoggingConfig()

    if config.format == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, config.level.value),
    )

    # aiohttp logs every connection at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
