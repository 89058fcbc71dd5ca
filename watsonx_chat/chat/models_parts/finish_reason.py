"""Why the model stopped generating."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    TIME_LIMIT = "time_limit"
    CANCELLED = "cancelled"
    ERROR = "error"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["FinishReason"]:
        """Map a wire value to the enum; ``None`` means the output is incomplete."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


__all__ = ["FinishReason"]
