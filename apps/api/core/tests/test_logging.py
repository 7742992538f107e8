"""Tests for structured logging setup."""

import json
import logging

import structlog

from apps.api.core.logging import setup_logging


class TestStructuredLogging:
    """Test structlog outputs structured JSON."""

    def test_setup_logging_dev_mode(self):
        """Dev mode should configure console renderer without errors."""
        setup_logging(log_level="DEBUG", json_output=False)
        logger = structlog.get_logger()
        assert logger is not None

    def test_json_output_keeps_rupee_symbol(self, caplog):
        """Production mode renders one JSON object per event, unescaped."""
        setup_logging(log_level="INFO", json_output=True)
        caplog.set_level(logging.INFO)

        logger = structlog.get_logger("capture.test")
        logger.info("user_notified", outcome="success", message="Expense of ₹750.00 added successfully!")

        rendered = caplog.records[-1].getMessage()
        assert "₹750.00" in rendered
        body = json.loads(rendered)
        assert body["event"] == "user_notified"
        assert body["level"] == "info"
        assert body["logger"] == "capture.test"
        assert "timestamp" in body
