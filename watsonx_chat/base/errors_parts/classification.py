"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements HTTP status extraction and status-to-code mapping for exceptions
raised by the service, ``httpx`` and the standard library.
"""
from __future__ import annotations

import concurrent.futures
from typing import Optional

import httpx

from .error_code import ErrorCode, code_for_status
from .watsonx_error import WatsonxError


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    val = getattr(exc, "status_code", None)
    if isinstance(val, int) and 100 <= val < 600:
        return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. WatsonxError passthrough.
        2. Cancellation.
        3. Timeouts (``httpx`` and builtin).
        4. Other ``httpx`` transport failures.
        5. HTTP status mapping.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, WatsonxError):
        return exc.code
    if isinstance(exc, concurrent.futures.CancelledError):
        return ErrorCode.CANCELLED
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSPORT
    return code_for_status(_extract_status(exc))


__all__ = ["classify_exception", "_extract_status"]
