"""
Structured service error exception type.

Wraps HTTP and protocol failures with the decoded upstream error body and a
normalized :class:`ErrorCode` for retry decisions and structured logging.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode, code_for_status
from .error_details import ErrorDetails


@dataclass(eq=False)
class WatsonxError(Exception):
    """Represents a failed call to the chat service.

    Attributes:
        message: Human-readable error message suitable for logging.
        status_code: HTTP status of the failed response, when there was one.
        details: Decoded error body, when the response carried one.
        raw: Optional original exception for diagnostics.
    """

    message: str
    status_code: Optional[int] = None
    details: Optional[ErrorDetails] = None
    raw: Optional[BaseException] = None

    @property
    def code(self) -> ErrorCode:
        if self.is_token_expired():
            return ErrorCode.TOKEN_EXPIRED
        return code_for_status(self.status_code)

    def is_token_expired(self) -> bool:
        return self.details is not None and self.details.is_token_expired(self.status_code)

    def __str__(self) -> str:  # pragma: no cover - trivial
        status = self.status_code if self.status_code is not None else "-"
        return f"[{status}] {self.code.value}: {self.message}"


__all__ = ["WatsonxError"]
