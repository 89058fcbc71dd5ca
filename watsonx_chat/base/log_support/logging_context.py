"""Structured logging context object for chat calls.

This module defines :class:`LogContext`, a dataclass carrying the fields
shared by every log event of one chat call (model, request id, transaction
id, completion id and extra metadata).
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for chat logging events."""

    model_id: Optional[str] = None
    request_id: Optional[str] = None
    transaction_id: Optional[str] = None
    completion_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}

    def with_completion(self, completion_id: Optional[str]) -> "LogContext":
        return replace(self, completion_id=completion_id)


__all__ = ["LogContext"]
