"""
Tests for the errors module.
"""

import asyncio

import httpx

from http_request_worker.errors import (
    ClientStatusError,
    ConstructionError,
    DecodeError,
    DispatchError,
    HttpWorkerError,
    ParseError,
    ServerStatusError,
    StatusError,
    TransportError,
    ValidationError,
    wrap_transport_error,
)


class TestErrorHierarchy:
    """Test error class hierarchy."""

    def test_base_error_with_context(self):
        """Test that base error captures context."""
        error = HttpWorkerError(
            "Something went wrong",
            context={"key": "value", "count": 42},
        )

        assert error.message == "Something went wrong"
        assert error.context == {"key": "value", "count": 42}
        assert "key" in str(error)

    def test_base_error_without_context(self):
        """Test error without context."""
        error = HttpWorkerError("Simple error")

        assert error.message == "Simple error"
        assert error.context == {}
        assert str(error) == "Simple error"

    def test_parse_error_inheritance(self):
        assert isinstance(DecodeError("bad json"), ParseError)
        assert isinstance(ValidationError("no url"), ParseError)
        assert isinstance(ParseError("x"), HttpWorkerError)

    def test_dispatch_error_inheritance(self):
        """Test dispatch error hierarchy."""
        assert isinstance(ConstructionError("bad url"), DispatchError)
        assert isinstance(TransportError("refused"), DispatchError)
        assert isinstance(ClientStatusError("404", status_code=404), StatusError)
        assert isinstance(ServerStatusError("503", status_code=503), StatusError)
        assert isinstance(StatusError("x", status_code=500), DispatchError)

    def test_status_error_keeps_code(self):
        error = ServerStatusError("Error on http POST: 503 Service Unavailable", status_code=503)

        assert error.status_code == 503
        assert error.context == {}


class TestErrorWrapping:
    """Test transport error wrapping."""

    def test_wrap_connect_error(self):
        original = httpx.ConnectError("Connection refused")
        wrapped = wrap_transport_error(original)

        assert isinstance(wrapped, TransportError)
        assert wrapped.message == "Error on http POST: Connection refused"
        assert wrapped.context["error_type"] == "ConnectError"

    def test_wrap_httpx_timeout(self):
        wrapped = wrap_transport_error(httpx.ReadTimeout("timed out"))

        assert wrapped.message.startswith("Timeout on http POST")

    def test_wrap_asyncio_timeout(self):
        wrapped = wrap_transport_error(asyncio.TimeoutError())

        assert wrapped.message == "Timeout on http POST: TimeoutError"

    def test_wrap_keeps_caller_context(self):
        wrapped = wrap_transport_error(
            httpx.ConnectError("unreachable"), context={"timeout_seconds": 3}
        )

        assert wrapped.context["timeout_seconds"] == 3
        assert wrapped.context["original_error"] == "unreachable"
