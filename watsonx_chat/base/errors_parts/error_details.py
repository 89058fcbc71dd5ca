"""
Decoded upstream error body.

The chat endpoints answer non-2xx requests with a JSON document shaped as
``{"status_code": 401, "trace": "...", "errors": [{"code": ..., "message":
..., "more_info": ...}]}``. These pydantic models carry that document on
:class:`WatsonxError` so callers can branch on the upstream error codes.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

AUTHENTICATION_TOKEN_EXPIRED = "authentication_token_expired"
COS_ACCESS_DENIED = "cos_access_denied"


class ErrorEntry(BaseModel):
    """One entry of the ``errors`` array."""

    model_config = ConfigDict(extra="ignore")

    code: str
    message: str = ""
    more_info: Optional[str] = None

    def is_code(self, code: str) -> bool:
        return self.code == code


class ErrorDetails(BaseModel):
    """Decoded error body returned by the service."""

    model_config = ConfigDict(extra="ignore")

    status_code: Optional[int] = None
    trace: Optional[str] = None
    errors: List[ErrorEntry] = Field(default_factory=list)

    def has_code(self, code: str) -> bool:
        return any(e.is_code(code) for e in self.errors)

    def first_message(self) -> Optional[str]:
        for entry in self.errors:
            if entry.message:
                return entry.message
        return None

    def is_token_expired(self, status_code: Optional[int]) -> bool:
        """Return True for the two expired-credential shapes.

        A 401 carrying ``authentication_token_expired`` (platform token) or a
        403 carrying ``cos_access_denied`` (object storage token).
        """
        if status_code == 401 and self.has_code(AUTHENTICATION_TOKEN_EXPIRED):
            return True
        return status_code == 403 and self.has_code(COS_ACCESS_DENIED)


__all__ = [
    "ErrorEntry",
    "ErrorDetails",
    "AUTHENTICATION_TOKEN_EXPIRED",
    "COS_ACCESS_DENIED",
]
