"""
Errors surfaced while consuming a chat event stream.

Both types are delivered to ``ChatHandler.on_error`` and do not terminate the
stream on their own.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode
from .watsonx_error import WatsonxError


@dataclass(eq=False)
class StreamEventError(WatsonxError):
    """The service sent an ``event: error`` frame."""

    @property
    def code(self) -> ErrorCode:
        return ErrorCode.STREAM


@dataclass(eq=False)
class EventDecodeError(WatsonxError):
    """A ``data`` payload could not be decoded as a chat completion chunk."""

    data: Optional[str] = None

    @property
    def code(self) -> ErrorCode:
        return ErrorCode.VALIDATION


__all__ = ["StreamEventError", "EventDecodeError"]
