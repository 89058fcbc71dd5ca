"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `watsonx_chat.base.errors` for the stable surface.
"""

from .error_code import ErrorCode, code_for_status
from .error_details import ErrorDetails, ErrorEntry
from .watsonx_error import WatsonxError
from .authentication_error import AuthenticationError
from .transport_error import TransportError
from .stream_errors import EventDecodeError, StreamEventError
from .classification import classify_exception

__all__ = [
    "ErrorCode",
    "code_for_status",
    "ErrorDetails",
    "ErrorEntry",
    "WatsonxError",
    "AuthenticationError",
    "TransportError",
    "EventDecodeError",
    "StreamEventError",
    "classify_exception",
]
