"""Tool-call events reported to a ``ChatHandler`` during streaming."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .tools import ToolCall


@dataclass(frozen=True)
class PartialToolCall:
    """One argument fragment of a tool call (not cumulative).

    ``id`` and ``name`` are the values known so far for the tool call.
    """

    completion_id: Optional[str]
    index: int
    id: Optional[str]
    name: Optional[str]
    arguments: str
    choice_index: int = 0


@dataclass(frozen=True)
class CompletedToolCall:
    """A fully merged tool call, reported once per tool-call index."""

    completion_id: Optional[str]
    tool_call: ToolCall
    choice_index: int = 0


__all__ = ["PartialToolCall", "CompletedToolCall"]
