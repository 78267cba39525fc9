"""Tests for structured logging setup."""

import json
import logging

import structlog

from tradebridge.config.models import LogFormat, LoggingConfig, LogLevel
from tradebridge.logs import setup_logging


class TestSetupLogging:
    def teardown_method(self):
        structlog.reset_defaults()

    def test_json_output(self, capsys):
        setup_logging(LoggingConfig(level=LogLevel.INFO, format=LogFormat.JSON))
        logger = logging.getLogger("tradebridge.test_json")
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        logger.addHandler(handler)
        logger.propagate = False
        try:
            structlog.get_logger("tradebridge.test_json").info("order_created", symbol="BTC/EUR")
        finally:
            logger.removeHandler(handler)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "order_created"
        assert event["symbol"] == "BTC/EUR"
        assert event["level"] == "info"
        assert event["logger"] == "tradebridge.test_json"

    def test_level_filters_events(self, capsys):
        setup_logging(LoggingConfig(level=LogLevel.WARNING, format=LogFormat.TEXT))
        logger = logging.getLogger("tradebridge.test_level")
        logger.setLevel(logging.WARNING)
        handler = logging.StreamHandler()
        logger.addHandler(handler)
        logger.propagate = False
        try:
            structlog.get_logger("tradebridge.test_level").info("hidden_event")
            structlog.get_logger("tradebridge.test_level").warning("shown_event")
        finally:
            logger.removeHandler(handler)

        err = capsys.readouterr().err
        assert "hidden_event" not in err
        assert "shown_event" in err

    def test_aiohttp_logger_quietened(self):
        setup_logging()
        assert logging.getLogger("aiohttp").level == logging.WARNING
