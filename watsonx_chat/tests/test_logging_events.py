"""Structured logging helpers and the events emitted by the client."""
from __future__ import annotations

import json
import logging

import httpx

from watsonx_chat.base.logging import (
    BASE_LOGGER_NAME,
    REQUIRED_NORMALIZED_KEYS,
    LogContext,
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)
from watsonx_chat.base.log_support import JsonFormatter
from watsonx_chat.chat.models import UserMessage

from .helpers import RecordingHandler, chunk, make_service, sse, stream_response, usage_chunk


def test_module_loggers_hang_under_shared_logger():
    logger = get_logger("watsonx_chat.chat.session")
    assert logger.name == "watsonx.watsonx_chat.chat.session"  # nosec B101
    base = get_logger(BASE_LOGGER_NAME)
    assert base.propagate is False  # nosec B101
    assert get_logger("watsonx.auth").name == "watsonx.auth"  # nosec B101


def test_log_event_merges_context_and_drops_none(log_capture):
    ctx = LogContext(model_id="m", request_id="r1", extra={"tenant": "t"})
    log_event(get_logger("t"), "demo.event", ctx, count=2, skipped=None)
    (event,) = log_capture.named("demo.event")
    assert event == {"event": "demo.event", "model_id": "m", "request_id": "r1", "tenant": "t", "count": 2}  # nosec B101


def test_normalized_event_carries_required_keys(log_capture):
    normalized_log_event(get_logger("t"), "demo.norm", phase="start", attempt=1, tokens={"total_tokens": 3}, extra=1)
    (event,) = log_capture.named("demo.norm")
    assert set(REQUIRED_NORMALIZED_KEYS) - {"error_code"} <= set(event)  # nosec B101
    assert event["tokens"] == {"total_tokens": 3} and event["extra"] == 1  # nosec B101
    assert "error_code" not in event  # nosec B101


def test_normalized_fields_are_not_overwritten(log_capture):
    normalized_log_event(get_logger("t"), "demo.keep", phase="finalize", attempt=4, error_code="auth", structured=False)
    (event,) = log_capture.named("demo.keep")
    assert event["structured"] is True and event["error_code"] == "auth"  # nosec B101


def test_json_formatter_hoists_event_keys():
    record = logging.LogRecord("watsonx.t", logging.INFO, __file__, 1, json.dumps({"event": "x", "n": 1}), None, None)
    line = json.loads(JsonFormatter().format(record))
    assert line["event"] == "x" and line["n"] == 1 and line["level"] == "INFO"  # nosec B101
    assert "msg" not in line  # nosec B101


def test_configure_logger_sets_level_and_file(tmp_path):
    path = tmp_path / "logs" / "client.log"
    logger = configure_logger(level="debug", file_path=str(path))
    try:
        assert logger.level == logging.DEBUG  # nosec B101
        log_event(get_logger("t"), "demo.file")
        for handler in logger.handlers:
            handler.flush()
        assert '"event": "demo.file"' in path.read_text()  # nosec B101
    finally:
        configure_logger(level=logging.INFO, file_path=None)
    assert not any(getattr(h, "baseFilename", None) for h in logger.handlers)  # nosec B101


def test_streaming_call_emits_lifecycle_events(log_capture):
    def handler(request):
        return stream_response(sse(chunk("hey"), usage_chunk()))

    service = make_service(handler, log_requests=True, log_responses=True)
    service.chat_streaming([UserMessage.text("x")], RecordingHandler()).result(timeout=5)

    names = [e["event"] for e in log_capture.events()]
    assert names.index("chat.request") < names.index("stream.start") < names.index("stream.finish")  # nosec B101
    assert names.count("stream.event") == 2  # nosec B101
    (finish,) = log_capture.named("stream.finish")
    assert finish["completion_id"] == "chat-1" and finish["tokens"]["total_tokens"] == 18  # nosec B101
    assert finish["model_id"] == "ibm/granite-3-8b-instruct" and finish["request_id"]  # nosec B101


def test_retries_are_logged(log_capture):
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            return httpx.Response(429, text="slow down")
        return httpx.Response(200, json={"id": "c", "choices": []})

    make_service(handler).chat([UserMessage.text("x")])
    (event,) = log_capture.named("chat.retry")
    assert event["attempt"] == 1 and event["reason"] == "retryable_status"  # nosec B101
    assert event["error_code"] == "rate_limit"  # nosec B101
