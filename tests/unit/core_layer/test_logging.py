"""
Unit Tests for Logging Module

Tests logger creation, request context, redaction and log_stage.
"""

from unittest.mock import MagicMock, patch

import pytest

from tiered_cache.core.config.constants import Stage
from tiered_cache.core.logging.logger import (
    add_log_level_name,
    add_request_id,
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    redact_sensitive,
    request_context,
    set_request_id,
    setup_logging,
)


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation."""

    def test_get_logger_returns_logger_instance(self):
        """Test that get_logger returns a logger with logging methods."""
        logger = get_logger(__name__)
        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")

    def test_setup_logging_configures_structlog(self):
        """Test that setup_logging hands processors to structlog."""
        with patch("tiered_cache.core.logging.logger.structlog.configure") as configure:
            setup_logging(log_level="DEBUG", log_format="json")

        configure.assert_called_once()
        processors = configure.call_args.kwargs["processors"]
        assert redact_sensitive in processors
        assert add_request_id in processors


@pytest.mark.unit
class TestRequestContext:
    """Test request id context management."""

    def test_set_and_get_request_id(self):
        set_request_id("req-123")
        try:
            assert get_request_id() == "req-123"
        finally:
            clear_request_id()

    def test_clear_request_id(self):
        set_request_id("req-123")
        clear_request_id()
        assert get_request_id() is None

    def test_add_request_id_processor(self):
        """Test that the processor injects the id only when set."""
        clear_request_id()
        assert "request_id" not in add_request_id(None, "info", {"event": "x"})

        set_request_id("req-9")
        try:
            assert add_request_id(None, "info", {"event": "x"})["request_id"] == "req-9"
        finally:
            clear_request_id()

    def test_request_context_generates_and_restores(self):
        clear_request_id()
        with request_context() as request_id:
            assert request_id
            assert get_request_id() == request_id
        assert get_request_id() is None

    def test_request_context_keeps_caller_id(self):
        set_request_id("req-outer")
        try:
            with request_context() as request_id:
                assert request_id == "req-outer"
            assert get_request_id() == "req-outer"
        finally:
            clear_request_id()

    def test_request_context_explicit_id(self):
        clear_request_id()
        with request_context("req-explicit"):
            assert get_request_id() == "req-explicit"
        assert get_request_id() is None


@pytest.mark.unit
class TestProcessors:
    """Test custom structlog processors."""

    def test_redacts_email_in_cache_key(self):
        """Test that identifiers embedded in cache keys are scrubbed."""
        event = redact_sensitive(None, "info", {"event": "hit", "cache_key": "profile:jane@example.com"})
        assert event["cache_key"] == "profile:[EMAIL]"

    def test_redacts_token_in_event(self):
        event = redact_sensitive(None, "info", {"event": "token sk-abcdefghijklmnop used"})
        assert "sk-abcdefghijklmnop" not in event["event"]
        assert "[REDACTED]" in event["event"]

    def test_leaves_other_fields_alone(self):
        event = redact_sensitive(None, "info", {"event": "ok", "owner": "jane@example.com"})
        assert event["owner"] == "jane@example.com"

    def test_level_name_upper_cased(self):
        assert add_log_level_name(None, "info", {"level": "warning"})["level"] == "WARNING"


@pytest.mark.unit
class TestLogStage:
    """Test the log_stage helper."""

    def test_log_stage_uses_enum_value(self):
        """Test that Stage members are logged by value."""
        logger = MagicMock()
        log_stage(logger, Stage.WRITE_BACK, "Cache populated", persisted=True)

        logger.info.assert_called_once_with("Cache populated", stage="7.0_WRITE_BACK", persisted=True)

    def test_log_stage_respects_level(self):
        logger = MagicMock()
        log_stage(logger, "custom", "slow", level="WARNING")

        logger.warning.assert_called_once_with("slow", stage="custom")
        logger.info.assert_not_called()
