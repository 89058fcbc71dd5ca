"""Tests for the event envelope decoder."""
from __future__ import annotations

import json

from watsonx_chat.base.errors import ErrorCode, EventDecodeError, StreamEventError
from watsonx_chat.chat.decoder import EventEnvelopeDecoder, EventKind
from watsonx_chat.chat.sse import SseFrame

from ..helpers import chunk, error_body

decoder = EventEnvelopeDecoder()


def test_message_frames_decode_to_chunks():
    for event in (None, "message"):
        decoded = decoder.decode(SseFrame(data=json.dumps(chunk("Hi")), event=event))
        assert decoded.kind is EventKind.CHUNK  # nosec B101
        assert decoded.chunk.choices[0].delta.content == "Hi"  # nosec B101
        assert decoded.chunk.id == "chat-1"  # nosec B101


def test_malformed_payload_is_a_per_event_decode_error():
    decoded = decoder.decode(SseFrame(data='{"choices": [{"index": "x"'))
    assert decoded.kind is EventKind.DECODE_ERROR  # nosec B101
    assert isinstance(decoded.error, EventDecodeError)  # nosec B101
    assert decoded.error.code is ErrorCode.VALIDATION  # nosec B101
    assert decoded.error.data == '{"choices": [{"index": "x"'  # nosec B101


def test_error_event_uses_error_body_message():
    body = json.dumps(error_body(500, "internal_error", "model crashed"))
    decoded = decoder.decode(SseFrame(data=body, event="error"))
    assert decoded.kind is EventKind.ERROR  # nosec B101
    assert isinstance(decoded.error, StreamEventError)  # nosec B101
    assert decoded.error.message == "model crashed"  # nosec B101
    assert decoded.error.details.errors[0].code == "internal_error"  # nosec B101


def test_error_event_with_plain_text_keeps_raw_text():
    decoded = decoder.decode(SseFrame(data="upstream went away", event="error"))
    assert decoded.error.message == "upstream went away"  # nosec B101
    assert decoded.error.details is None  # nosec B101


def test_close_empty_and_unknown_events():
    assert decoder.decode(SseFrame(data="", event="close")).kind is EventKind.CLOSE  # nosec B101
    assert decoder.decode(SseFrame(data="  ")).kind is EventKind.IGNORED  # nosec B101
    assert decoder.decode(SseFrame(data="{}", event="ping")).kind is EventKind.IGNORED  # nosec B101
