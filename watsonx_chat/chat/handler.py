"""
Streaming callback contract.

Subclass :class:`ChatHandler` and pass an instance to
``ChatService.chat_streaming``. All callbacks of one stream run one at a
time, in arrival order, on a callback worker thread (never on the thread
reading the network), so a handler needs no locking of its own.

Failure modes:
- An exception raised by any callback except ``on_error`` is delivered to
  ``on_error``. When raised from ``on_complete_response`` it also fails the
  future returned by ``chat_streaming``.
- An exception raised by ``on_error`` itself fails the future directly.

A tool call is reported complete as soon as the stream moves to another
tool index. Some models interleave fragments, so more ``on_partial_tool_call``
events for an already completed index can follow; the tool calls in
``on_complete_response`` then carry the full arguments, unless a tool
interceptor is set, and supersede the earlier ``on_complete_tool_call``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .models import ChatResponse, CompletedToolCall, PartialChatResponse, PartialToolCall


class ChatHandler(ABC):
    """Receives the incremental output of one streaming chat call."""

    #: Stop at the first stream error instead of reporting it and continuing.
    fail_on_first_error: bool = False

    @abstractmethod
    def on_partial_response(self, text: str, chunk: Optional[PartialChatResponse]) -> None:
        """A new piece of visible answer text."""

    @abstractmethod
    def on_complete_response(self, response: ChatResponse) -> None:
        """The aggregated response, after interceptors ran."""

    @abstractmethod
    def on_error(self, error: BaseException) -> None:
        """A recoverable stream error, a callback failure or a terminal failure."""

    def on_partial_thinking(self, text: str, chunk: Optional[PartialChatResponse]) -> None:
        return None

    def on_partial_tool_call(self, call: PartialToolCall) -> None:
        return None

    def on_complete_tool_call(self, call: CompletedToolCall) -> None:
        return None


__all__ = ["ChatHandler"]
