"""
Streaming chunk payloads.

One ``PartialChatResponse`` is decoded per SSE ``data`` payload. Fields are
sparse: the first chunk usually carries the role, content and tool-call
fragments follow, and a final chunk with empty ``choices`` carries ``usage``.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .response import Usage


class _Chunk(BaseModel):
    model_config = ConfigDict(extra="ignore", protected_namespaces=())


class PartialFunction(_Chunk):
    name: Optional[str] = None
    arguments: Optional[str] = None


class PartialToolCallDelta(_Chunk):
    index: int = 0
    id: Optional[str] = None
    type: Optional[str] = None
    function: Optional[PartialFunction] = None


class Delta(_Chunk):
    role: Optional[str] = None
    content: Optional[str] = None
    reasoning_content: Optional[str] = None
    refusal: Optional[str] = None
    tool_calls: Optional[List[PartialToolCallDelta]] = None


class PartialChoice(_Chunk):
    index: int = 0
    delta: Delta = Field(default_factory=Delta)
    finish_reason: Optional[str] = None


class PartialChatResponse(_Chunk):
    id: Optional[str] = None
    object: Optional[str] = None
    model_id: Optional[str] = None
    model: Optional[str] = None
    model_version: Optional[str] = None
    created: Optional[int] = None
    created_at: Optional[str] = None
    choices: List[PartialChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @property
    def is_terminal(self) -> bool:
        """The usage-only chunk that ends a stream."""
        return not self.choices and self.usage is not None


__all__ = [
    "PartialFunction",
    "PartialToolCallDelta",
    "Delta",
    "PartialChoice",
    "PartialChatResponse",
]
