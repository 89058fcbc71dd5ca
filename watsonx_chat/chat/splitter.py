"""
Streaming thinking/content splitter.

Reasoning models configured with :class:`ExtractionTags` inline their
reasoning as ``<think>...</think>`` (optionally followed by
``<response>...</response>``) in the streamed content. The splitter scans
fragments one character at a time and classifies text as thinking or
response as soon as it is known, holding back only a partial tag (or a
partial ``\\u003c`` escape) until the next fragment settles it.

States:

- ``START``: nothing classified yet; leading whitespace is held back.
- ``THINKING``: inside the think tag.
- ``RESPONSE``: after the think tag (one tag) or inside the response tag.
- ``UNKNOWN``: between or after tagged blocks (two tags); text is dropped.
- ``NO_THINKING``: the model answered without tags; everything is response.

Each :meth:`ThinkingContentSplitter.feed` returns the segments the fragment
produced, in order, one per contiguous run of a single kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .models import ExtractionTags

_ESCAPES = (("\\u003c", "<"), ("\\u003e", ">"))


class SplitterState(str, Enum):
    START = "start"
    THINKING = "thinking"
    RESPONSE = "response"
    NO_THINKING = "no_thinking"
    UNKNOWN = "unknown"


class _Scan(Enum):
    CONTENT = 0
    OPEN_TAG_START = 1
    CLOSE_TAG_START = 2
    TAG_NAME = 3


class SegmentKind(str, Enum):
    THINKING = "thinking"
    RESPONSE = "response"


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    text: str


def _decode_escapes(text: str) -> str:
    for escaped, char in _ESCAPES:
        text = text.replace(escaped, char)
    return text


def _split_escape_tail(text: str) -> Tuple[str, str]:
    """Split off a trailing prefix of an escaped angle bracket."""
    idx = text.rfind("\\", max(0, len(text) - 5))
    if idx < 0:
        return text, ""
    tail = text[idx:]
    if any(escaped.startswith(tail) and escaped != tail for escaped, _ in _ESCAPES):
        return text[:idx], tail
    return text, ""


class ThinkingContentSplitter:
    """Incremental tag scanner for one choice of one stream.

    Args:
        tags: extraction tags; ``None`` passes all text through as response.
    """

    def __init__(self, tags: Optional[ExtractionTags] = None) -> None:
        self._tags = tags
        self._state = SplitterState.START if tags is not None else SplitterState.NO_THINKING
        self._scan = _Scan.CONTENT
        self._tag_buffer = ""
        self._text = ""
        self._preamble = ""
        self._carry = ""
        self._segments: List[Segment] = []
        if tags is not None:
            self._think_open = tags.open_tag(tags.think)
            self._think_close = tags.close_tag(tags.think)
            self._response_open = tags.open_tag(tags.response) if tags.response else None
            self._response_close = tags.close_tag(tags.response) if tags.response else None

    @property
    def state(self) -> SplitterState:
        return self._state

    def feed(self, fragment: str) -> List[Segment]:
        if not fragment and not self._carry:
            return []
        if self._tags is None:
            return [Segment(SegmentKind.RESPONSE, fragment)]
        text, self._carry = _split_escape_tail(self._carry + fragment)
        for ch in _decode_escapes(text):
            self._step(ch)
        self._flush_text()
        return self._drain()

    def flush(self) -> List[Segment]:
        """End of stream: release held-back text under the current state."""
        if self._tags is None:
            return []
        pending = self._tag_buffer + _decode_escapes(self._carry)
        self._tag_buffer = ""
        self._carry = ""
        self._scan = _Scan.CONTENT
        if self._state is SplitterState.START:
            pending = self._preamble + pending
            self._preamble = ""
            if pending:
                self._set_state(SplitterState.NO_THINKING)
                self._segments.append(Segment(SegmentKind.RESPONSE, pending))
            return self._drain()
        self._text += pending
        self._flush_text()
        return self._drain()

    def _step(self, ch: str) -> None:
        if self._state is SplitterState.NO_THINKING:
            self._text += ch
            return
        if self._scan is _Scan.CONTENT:
            if ch == "<":
                self._scan = _Scan.OPEN_TAG_START
                self._tag_buffer = ch
            else:
                self._append_text(ch)
            return
        if self._scan is _Scan.OPEN_TAG_START:
            self._scan = _Scan.CLOSE_TAG_START if ch == "/" else _Scan.TAG_NAME
            self._tag_buffer += ch
            if ch == "/":
                return
        else:
            self._tag_buffer += ch
        if not self._matches_prefix(self._tag_buffer):
            rejected = self._tag_buffer
            self._tag_buffer = ""
            self._scan = _Scan.CONTENT
            if self._state is SplitterState.START:
                self._text, self._preamble = self._preamble, ""
                self._state = SplitterState.NO_THINKING
            for c in rejected:
                self._append_text(c)
            return
        if ch == ">":
            tag = self._tag_buffer
            self._tag_buffer = ""
            self._scan = _Scan.CONTENT
            self._complete_tag(tag)

    def _append_text(self, ch: str) -> None:
        if self._state is SplitterState.START:
            if ch.isspace():
                self._preamble += ch
                return
            self._text = self._preamble
            self._preamble = ""
            self._state = SplitterState.NO_THINKING
        self._text += ch

    def _matches_prefix(self, partial: str) -> bool:
        if self._state is SplitterState.THINKING:
            candidates = (self._think_close,)
        elif self._state is SplitterState.RESPONSE:
            candidates = (self._response_close,)
        else:
            candidates = (self._think_open, self._think_close, self._response_open, self._response_close)
        return any(c is not None and c.startswith(partial) for c in candidates)

    def _complete_tag(self, tag: str) -> None:
        if tag == self._think_open:
            new_state = SplitterState.THINKING
        elif tag == self._think_close:
            new_state = SplitterState.RESPONSE if self._response_open is None else SplitterState.UNKNOWN
        elif tag == self._response_open:
            new_state = SplitterState.RESPONSE
        else:
            new_state = SplitterState.UNKNOWN
        self._preamble = ""
        self._set_state(new_state)

    def _set_state(self, state: SplitterState) -> None:
        if state is not self._state:
            self._flush_text()
            self._state = state

    def _flush_text(self) -> None:
        if not self._text:
            return
        text, self._text = self._text, ""
        if self._state is SplitterState.THINKING:
            kind = SegmentKind.THINKING
        elif self._state in (SplitterState.RESPONSE, SplitterState.NO_THINKING):
            kind = SegmentKind.RESPONSE
        else:
            return
        if self._segments and self._segments[-1].kind is kind:
            self._segments[-1] = Segment(kind, self._segments[-1].text + text)
        else:
            self._segments.append(Segment(kind, text))

    def _drain(self) -> List[Segment]:
        out, self._segments = self._segments, []
        return out


__all__ = ["SplitterState", "SegmentKind", "Segment", "ThinkingContentSplitter"]
