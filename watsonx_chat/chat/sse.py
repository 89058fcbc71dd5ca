"""
Server-Sent Events frame reader.

Reassembles an arbitrarily chunked byte (or text) stream into
:class:`SseFrame` objects following the SSE grammar:

- lines end with ``\\n``, ``\\r\\n`` or ``\\r`` (a ``\\r\\n`` pair split
  across two chunks counts once);
- ``field: value`` lines set ``event``, ``id``, ``retry`` or append to
  ``data`` (one leading space after the colon is dropped);
- lines starting with ``:`` are comments, unknown fields are ignored;
- a blank line dispatches the frame, multiple ``data`` lines joined by
  ``\\n``.

A reader is bound to one connection and never replays frames. At end of
input :meth:`SseFrameReader.flush` dispatches a frame left unterminated by
the server instead of dropping it.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Union

Chunk = Union[bytes, str]


@dataclass(frozen=True)
class SseFrame:
    data: str
    event: Optional[str] = None
    id: Optional[str] = None
    retry: Optional[int] = None


class SseFrameReader:
    """Incremental SSE parser; feed chunks, collect complete frames."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._partial = ""
        self._skip_lf = False
        self._reset_frame()

    def _reset_frame(self) -> None:
        self._data: List[str] = []
        self._event: Optional[str] = None
        self._id: Optional[str] = None
        self._retry: Optional[int] = None
        self._seen_field = False

    def feed(self, chunk: Chunk) -> List[SseFrame]:
        """Consume one transport chunk and return the frames it completed."""
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        return self._consume(text)

    def flush(self) -> List[SseFrame]:
        """Signal end of input; returns a trailing unterminated frame if any."""
        frames = self._consume(self._decoder.decode(b"", final=True))
        if self._partial:
            self._process_line(self._partial)
            self._partial = ""
        frame = self._dispatch()
        if frame is not None:
            frames.append(frame)
        return frames

    def _consume(self, text: str) -> List[SseFrame]:
        frames: List[SseFrame] = []
        start = 0
        i = 0
        n = len(text)
        if self._skip_lf and n:
            self._skip_lf = False
            if text[0] == "\n":
                start = i = 1
        while i < n:
            ch = text[i]
            if ch == "\n" or ch == "\r":
                line = self._partial + text[start:i]
                self._partial = ""
                if ch == "\r":
                    if i + 1 < n:
                        if text[i + 1] == "\n":
                            i += 1
                    else:
                        self._skip_lf = True
                if line == "":
                    frame = self._dispatch()
                    if frame is not None:
                        frames.append(frame)
                else:
                    self._process_line(line)
                start = i + 1
            i += 1
        self._partial += text[start:]
        return frames

    def _process_line(self, line: str) -> None:
        if line.startswith(":"):
            return
        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name == "id":
            if "\0" not in value:
                self._id = value
        elif name == "retry":
            if value.isdigit():
                self._retry = int(value)
        else:
            return
        self._seen_field = True

    def _dispatch(self) -> Optional[SseFrame]:
        if not self._seen_field:
            self._reset_frame()
            return None
        frame = SseFrame(
            data="\n".join(self._data),
            event=self._event or None,
            id=self._id,
            retry=self._retry,
        )
        self._reset_frame()
        return frame


def iter_frames(chunks: Iterable[Chunk]) -> Iterator[SseFrame]:
    """Lazily yield frames from an iterable of chunks."""
    reader = SseFrameReader()
    for chunk in chunks:
        yield from reader.feed(chunk)
    yield from reader.flush()


__all__ = ["SseFrame", "SseFrameReader", "iter_frames"]
