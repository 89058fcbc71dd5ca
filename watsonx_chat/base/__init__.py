"""Shared infrastructure: errors, logging, timeouts, HTTP pool, retry."""

from .errors import (
    AuthenticationError,
    ErrorCode,
    ErrorDetails,
    EventDecodeError,
    StreamEventError,
    TransportError,
    WatsonxError,
    classify_exception,
)
from .cancellation import CancellationToken, CancelledError

__all__ = [
    "AuthenticationError",
    "ErrorCode",
    "ErrorDetails",
    "EventDecodeError",
    "StreamEventError",
    "TransportError",
    "WatsonxError",
    "classify_exception",
    "CancellationToken",
    "CancelledError",
]
