"""
Tests for the logging module.
"""

from http_request_worker import dispatcher, outcome, parser, worker
from http_request_worker.logging import (
    add_context_info,
    get_logger,
    get_message_id,
    get_retry_count,
    logging_context,
)


class TestGetLogger:
    """Test logger construction."""

    def test_returns_bindable_logger(self):
        log = get_logger("http_request_worker.tests").bind(message_id="msg_1")

        assert hasattr(log, "info")
        assert hasattr(log, "warning")

    def test_modules_log_through_package_logger(self):
        for module in (parser, dispatcher, outcome, worker):
            assert module.get_logger is get_logger


class TestLoggingContext:
    """Test logging context management."""

    def test_logging_context_sets_values(self):
        """Test that logging context sets values correctly."""
        with logging_context(message_id="msg_123", retry_count=2):
            assert get_message_id() == "msg_123"
            assert get_retry_count() == 2

    def test_logging_context_restores_values(self):
        """Test that context is restored after exiting."""
        with logging_context(message_id="outer"):
            assert get_message_id() == "outer"

            with logging_context(message_id="inner"):
                assert get_message_id() == "inner"

            assert get_message_id() == "outer"

        assert get_message_id() is None

    def test_logging_context_partial_values(self):
        """Test that partial context values work."""
        with logging_context(retry_count=0):
            assert get_retry_count() == 0
            assert get_message_id() is None


class TestAddContextInfo:
    """Test the context processor."""

    def test_adds_context_values(self):
        with logging_context(message_id="msg_1", retry_count=0):
            event = add_context_info(None, "info", {"event": "dispatch.started"})

        assert event["message_id"] == "msg_1"
        assert event["retry_count"] == 0

    def test_explicit_values_win(self):
        with logging_context(message_id="ctx"):
            event = add_context_info(None, "info", {"event": "x", "message_id": "bound"})

        assert event["message_id"] == "bound"

    def test_no_context_no_keys(self):
        event = add_context_info(None, "info", {"event": "x"})

        assert "message_id" not in event
        assert "retry_count" not in event
