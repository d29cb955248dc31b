"""Tests for structured logging configuration."""

import json
import logging
import re
from collections.abc import Iterator
from io import StringIO

import pytest
import structlog

from creo.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Reset structlog state after each test."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)


def _capture_log_output(
    environment: str, log_level: str = "DEBUG", **fields: object
) -> str:
    """Configure logging, emit a message, return captured output."""
    configure_logging(environment=environment, log_level=log_level)

    stream = StringIO()
    root = logging.getLogger()
    if not root.handlers or not isinstance(root.handlers[0], logging.StreamHandler):
        raise RuntimeError("Expected configure_logging to set up a StreamHandler")

    original_stream = root.handlers[0].stream
    root.handlers[0].stream = stream

    logger = structlog.get_logger()
    logger.info("test_event", **(fields or {"provider": "gemini"}))

    root.handlers[0].stream = original_stream
    return stream.getvalue()


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_production_json(self) -> None:
        """Production environment produces valid JSON output."""
        output = _capture_log_output("production")
        parsed = json.loads(output)
        assert parsed["event"] == "test_event"
        assert parsed["provider"] == "gemini"
        assert parsed["level"] == "info"

    def test_configure_development_console(self) -> None:
        """Development environment produces human-readable console output."""
        output = _capture_log_output("development")
        plain = re.sub(r"\x1b\[[0-9;]*m", "", output)
        assert "test_event" in plain
        assert "provider=gemini" in plain

    def test_configure_sets_log_level(self) -> None:
        """Root logger level is set to the specified value."""
        configure_logging(log_level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_configure_includes_timestamp(self) -> None:
        """Production JSON output contains ISO timestamp."""
        output = _capture_log_output("production")
        parsed = json.loads(output)
        assert "timestamp" in parsed
        # ISO format contains 'T' separator
        assert "T" in parsed["timestamp"]

    def test_http_client_loggers_quieted(self) -> None:
        """httpx request lines (which may carry a key) stay below INFO."""
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING


class TestRedaction:
    """Credential-bearing fields never reach the output."""

    @pytest.mark.parametrize("field", ["api_key", "key", "Authorization"])
    def test_sensitive_field_redacted(self, field: str) -> None:
        output = _capture_log_output("production", **{field: "sk-emergent-xyz"})
        parsed = json.loads(output)
        assert parsed[field] == "***REDACTED***"
        assert "sk-emergent-xyz" not in output

    def test_other_fields_untouched(self) -> None:
        output = _capture_log_output("production", model="gpt-4o", attempts=2)
        parsed = json.loads(output)
        assert parsed["model"] == "gpt-4o"
        assert parsed["attempts"] == 2
