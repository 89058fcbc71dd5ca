"""Unified error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``watsonx_chat.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_code import ErrorCode, code_for_status
from .errors_parts.error_details import (
    AUTHENTICATION_TOKEN_EXPIRED,
    COS_ACCESS_DENIED,
    ErrorDetails,
    ErrorEntry,
)
from .errors_parts.watsonx_error import WatsonxError
from .errors_parts.authentication_error import AuthenticationError
from .errors_parts.transport_error import TransportError
from .errors_parts.stream_errors import EventDecodeError, StreamEventError
from .errors_parts.classification import classify_exception

__all__ = [
    "ErrorCode",
    "code_for_status",
    "AUTHENTICATION_TOKEN_EXPIRED",
    "COS_ACCESS_DENIED",
    "ErrorDetails",
    "ErrorEntry",
    "WatsonxError",
    "AuthenticationError",
    "TransportError",
    "EventDecodeError",
    "StreamEventError",
    "classify_exception",
]
