"""
Custom exceptions and error handling for the HTTP request worker.

Provides:
- Typed exception hierarchy for parse-time and dispatch-time failures
- Error context preservation for debugging
- Wrapping of httpx / timeout exceptions into the hierarchy
"""

from typing import Any


class HttpWorkerError(Exception):
    """Base exception for all HTTP request worker errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


# =============================================================================
# Parse Errors (raised synchronously, no descriptor is produced)
# =============================================================================


class ParseError(HttpWorkerError):
    """Base class for envelope parsing errors."""

    pass


class DecodeError(ParseError):
    """Message body is not a valid request payload."""

    pass


class ValidationError(ParseError):
    """A required field is missing or empty."""

    pass


# =============================================================================
# Dispatch Errors (recorded on the descriptor, never raised out of dispatch)
# =============================================================================


class DispatchError(HttpWorkerError):
    """Base class for errors recorded by a dispatch attempt."""

    pass


class ConstructionError(DispatchError):
    """The outbound request could not be built from the descriptor."""

    pass


class TransportError(DispatchError):
    """Network failure or timeout while reaching the target."""

    pass


class StatusError(DispatchError):
    """Target answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.status_code = status_code


class ClientStatusError(StatusError):
    """4xx status: the request itself is invalid, retrying will not help."""

    pass


class ServerStatusError(StatusError):
    """1xx, 3xx or 5xx status: the attempt may succeed later."""

    pass


class OutcomeAlreadyRecordedError(HttpWorkerError):
    """A descriptor's outcome fields were written twice."""

    pass


# =============================================================================
# Error Handling Utilities
# =============================================================================


def wrap_transport_error(
    exc: BaseException, context: dict[str, Any] | None = None
) -> TransportError:
    """
    Wrap an httpx or timeout exception in our typed error hierarchy.

    Args:
        exc: The original exception
        context: Additional context for debugging

    Returns:
        TransportError carrying the original error details
    """
    ctx = context or {}
    ctx['original_error'] = str(exc)
    ctx['error_type'] = type(exc).__name__

    detail = str(exc) or type(exc).__name__
    if isinstance(exc, TimeoutError) or 'timeout' in type(exc).__name__.lower():
        return TransportError(f"Timeout on http POST: {detail}", context=ctx)
    return TransportError(f"Error on http POST: {detail}", context=ctx)
