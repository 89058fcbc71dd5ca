"""
Event envelope decoder.

Turns one :class:`SseFrame` into a :class:`DecodedEvent`:

- no ``event`` (or ``message``): the ``data`` payload is decoded as a
  :class:`PartialChatResponse`; a payload that fails to decode becomes a
  ``DECODE_ERROR`` event for that frame only;
- ``error``: the payload becomes a :class:`StreamEventError` (decoded error
  body when the payload is one, raw text otherwise);
- ``close``: end of stream;
- anything else is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from ..base.errors import ErrorDetails, EventDecodeError, StreamEventError, WatsonxError
from .models import PartialChatResponse
from .sse import SseFrame


class EventKind(str, Enum):
    CHUNK = "chunk"
    ERROR = "error"
    DECODE_ERROR = "decode_error"
    CLOSE = "close"
    IGNORED = "ignored"


@dataclass(frozen=True)
class DecodedEvent:
    kind: EventKind
    frame: SseFrame
    chunk: Optional[PartialChatResponse] = None
    error: Optional[WatsonxError] = None


def _error_from_payload(data: str) -> StreamEventError:
    try:
        details = ErrorDetails.model_validate_json(data)
    except ValidationError:
        return StreamEventError(message=data)
    if not details.errors:
        return StreamEventError(message=data)
    return StreamEventError(
        message=details.first_message() or data,
        status_code=details.status_code,
        details=details,
    )


class EventEnvelopeDecoder:
    """Stateless frame decoder."""

    def decode(self, frame: SseFrame) -> DecodedEvent:
        event = frame.event
        if event is None or event == "message":
            if not frame.data.strip():
                return DecodedEvent(EventKind.IGNORED, frame)
            try:
                chunk = PartialChatResponse.model_validate_json(frame.data)
            except ValidationError as e:
                err = EventDecodeError(message=f"malformed chunk: {e.errors()[0]['msg']}", data=frame.data, raw=e)
                return DecodedEvent(EventKind.DECODE_ERROR, frame, error=err)
            return DecodedEvent(EventKind.CHUNK, frame, chunk=chunk)
        if event == "error":
            return DecodedEvent(EventKind.ERROR, frame, error=_error_from_payload(frame.data))
        if event == "close":
            return DecodedEvent(EventKind.CLOSE, frame)
        return DecodedEvent(EventKind.IGNORED, frame)


__all__ = ["EventKind", "DecodedEvent", "EventEnvelopeDecoder"]
