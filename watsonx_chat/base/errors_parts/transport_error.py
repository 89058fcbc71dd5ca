"""I/O failure raised when the HTTP exchange itself breaks."""
from __future__ import annotations

from dataclasses import dataclass

from .error_code import ErrorCode
from .watsonx_error import WatsonxError


@dataclass(eq=False)
class TransportError(WatsonxError):
    """Connection, read or protocol failure below the HTTP status layer.

    Never retried: the request may or may not have reached the service.
    """

    @property
    def code(self) -> ErrorCode:
        return ErrorCode.TRANSPORT


__all__ = ["TransportError"]
