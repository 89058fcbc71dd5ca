"""Tests for the SSE frame reader.

Covers:
- Field parsing (data joining, event, id, retry, comments, unknown fields).
- Arbitrary chunk boundaries including split CRLF and split UTF-8 sequences.
- End-of-input flushing of an unterminated frame.
"""
from __future__ import annotations

from watsonx_chat.chat.sse import SseFrame, SseFrameReader, iter_frames

BODY = (
    ": keep-alive comment\n"
    "id: 1\n"
    "data: {\"a\": 1}\n"
    "\n"
    "event: error\n"
    "data: first line\n"
    "data: second line\n"
    "\n"
    "unknown: ignored\n"
    "retry: 1500\n"
    "data:no-space\n"
    "\n"
    "event: close\n"
    "data: \n"
    "\n"
)

EXPECTED = [
    SseFrame(data='{"a": 1}', id="1"),
    SseFrame(data="first line\nsecond line", event="error"),
    SseFrame(data="no-space", retry=1500),
    SseFrame(data="", event="close"),
]


def test_parses_fields_and_ignores_comments_and_unknown_fields():
    frames = list(iter_frames([BODY.encode()]))
    assert frames == EXPECTED  # nosec B101


def test_every_single_split_point_yields_same_frames():
    raw = BODY.encode()
    for cut in range(1, len(raw)):
        frames = list(iter_frames([raw[:cut], raw[cut:]]))
        assert frames == EXPECTED, f"split at {cut}"  # nosec B101


def test_byte_by_byte_delivery():
    raw = BODY.encode()
    frames = list(iter_frames(raw[i : i + 1] for i in range(len(raw))))
    assert frames == EXPECTED  # nosec B101


def test_crlf_and_cr_line_endings_including_split_pair():
    reader = SseFrameReader()
    out = reader.feed(b"data: one\r")
    out += reader.feed(b"\n\r\n")
    out += reader.feed(b"data: two\r\r")
    out += reader.flush()
    assert [f.data for f in out] == ["one", "two"]  # nosec B101


def test_multibyte_utf8_split_across_chunks():
    raw = "data: café ☃\n\n".encode("utf-8")
    snowman = raw.index("☃".encode("utf-8"))
    frames = list(iter_frames([raw[: snowman + 1], raw[snowman + 1 :]]))
    assert frames[0].data == "café ☃"  # nosec B101


def test_flush_dispatches_unterminated_frame():
    reader = SseFrameReader()
    assert reader.feed(b"data: tail") == []  # nosec B101
    frames = reader.flush()
    assert [f.data for f in frames] == ["tail"]  # nosec B101


def test_blank_lines_without_fields_produce_no_frames():
    assert list(iter_frames([b"\n\n: ping\n\n\n"])) == []  # nosec B101


def test_text_chunks_are_accepted():
    reader = SseFrameReader()
    frames = reader.feed("data: x\n\n")
    assert frames[0].data == "x"  # nosec B101
