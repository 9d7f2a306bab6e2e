"""Seymour exception hierarchy.

Base exceptions for the client layers with correlation ID support.

Usage:
    from seymour.exceptions import TransportError

    try:
        async with transport.open_stream(request) as chunks:
            ...
    except TransportError as e:
        logger.error("Stream failed (%s): %s", e.correlation_id, e)
"""

import uuid


class SeymourError(Exception):
    """Base exception for all Seymour client errors.

    Carries a correlation_id for tracing errors across layers.
    """

    def __init__(self, message: str, *, correlation_id: str | None = None):
        self.correlation_id = correlation_id or str(uuid.uuid4())
        super().__init__(message)


class TransportError(SeymourError):
    """The response stream could not be opened or broke before ``end``.

    Covers non-2xx responses, connection failures, timeouts and byte
    streams that are not valid UTF-8.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        correlation_id: str | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, correlation_id=correlation_id)


class ProtocolError(SeymourError):
    """An explicit ``error`` event sent by the backend."""

    pass


class ExchangeInProgressError(SeymourError):
    """A message was submitted while another exchange is still streaming."""

    def __init__(self, message: str, *, exchange_id: str | None = None, **kwargs):
        self.exchange_id = exchange_id
        super().__init__(message, **kwargs)


class ValidationError(SeymourError):
    """Errors from input validation (beyond Pydantic)."""

    pass


class ConfigurationError(SeymourError):
    """Errors from client configuration."""

    pass
