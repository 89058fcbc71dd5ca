"""Fakes and builders for chat service tests.

- :func:`sse` / :func:`chunk` build SSE bodies in the upstream wire shape.
- :class:`RecordingHandler` records every callback in delivery order.
- :class:`RotatingAuthenticator` hands out a new token after each
  invalidation so re-authentication is observable.
- :func:`make_service` wires a :class:`ChatService` to an
  ``httpx.MockTransport`` handler.
"""
from __future__ import annotations

import json
import random
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from watsonx_chat.auth import Authenticator
from watsonx_chat.base.resilience import RetryConfig
from watsonx_chat.chat.handler import ChatHandler
from watsonx_chat.chat.service import ChatService

Event = Tuple[str, Any]


def chunk(
    content: Optional[str] = None,
    *,
    tool_calls: Optional[List[Dict[str, Any]]] = None,
    reasoning: Optional[str] = None,
    finish_reason: Optional[str] = None,
    role: Optional[str] = None,
    completion_id: str = "chat-1",
    index: int = 0,
) -> Dict[str, Any]:
    delta: Dict[str, Any] = {}
    if role is not None:
        delta["role"] = role
    if content is not None:
        delta["content"] = content
    if reasoning is not None:
        delta["reasoning_content"] = reasoning
    if tool_calls is not None:
        delta["tool_calls"] = tool_calls
    return {
        "id": completion_id,
        "object": "chat.completion.chunk",
        "model_id": "ibm/granite-3-8b-instruct",
        "model": "ibm/granite-3-8b-instruct",
        "created": 1749764735,
        "created_at": "2025-06-12T21:45:35.981Z",
        "choices": [{"index": index, "delta": delta, "finish_reason": finish_reason}],
    }


def usage_chunk(completion_id: str = "chat-1") -> Dict[str, Any]:
    return {
        "id": completion_id,
        "choices": [],
        "usage": {"completion_tokens": 7, "prompt_tokens": 11, "total_tokens": 18},
    }


def tool_fragment(index: int, arguments: str = "", *, id: Optional[str] = None, name: Optional[str] = None) -> Dict[str, Any]:
    fn: Dict[str, Any] = {"arguments": arguments}
    if name is not None:
        fn["name"] = name
    out: Dict[str, Any] = {"index": index, "type": "function", "function": fn}
    if id is not None:
        out["id"] = id
    return out


def sse_frame(data: Any, event: Optional[str] = None, id: Optional[str] = None) -> bytes:
    lines = []
    if id is not None:
        lines.append(f"id: {id}")
    if event is not None:
        lines.append(f"event: {event}")
    text = data if isinstance(data, str) else json.dumps(data)
    lines.extend(f"data: {line}" for line in text.split("\n"))
    return ("\n".join(lines) + "\n\n").encode("utf-8")


def sse(*payloads: Any, close: bool = True) -> List[bytes]:
    """Encode payloads as ``message`` frames, optionally ending with close."""
    frames = [sse_frame(p, id=str(i + 1)) for i, p in enumerate(payloads)]
    if close:
        frames.append(sse_frame("", event="close"))
    return frames


def stream_response(frames: List[bytes], status: int = 200) -> httpx.Response:
    return httpx.Response(status, headers={"content-type": "text/event-stream"}, content=iter(frames))


def error_body(status: int, code: str, message: str) -> Dict[str, Any]:
    return {
        "status_code": status,
        "trace": "0123456789abcdef",
        "errors": [{"code": code, "message": message, "more_info": "https://cloud.ibm.com/apidocs"}],
    }


class RecordingHandler(ChatHandler):
    """Records callbacks as ``(kind, value)`` tuples in delivery order."""

    def __init__(
        self,
        *,
        jitter: float = 0.0,
        raise_on: Optional[str] = None,
        raise_in_on_error: bool = False,
        fail_on_first_error: bool = False,
        seed: int = 7,
    ) -> None:
        self.events: List[Event] = []
        self.threads: set = set()
        self.errors: List[BaseException] = []
        self.done = threading.Event()
        self._jitter = jitter
        self._random = random.Random(seed)
        self._raise_on = raise_on
        self._raise_in_on_error = raise_in_on_error
        self.fail_on_first_error = fail_on_first_error

    def _record(self, kind: str, value: Any) -> None:
        if self._jitter:
            time.sleep(self._random.uniform(0, self._jitter))
        self.threads.add(threading.current_thread().name)
        self.events.append((kind, value))
        if self._raise_on == kind:
            raise RuntimeError(f"handler failure in {kind}")

    def on_partial_response(self, text, chunk):
        self._record("response", text)

    def on_partial_thinking(self, text, chunk):
        self._record("thinking", text)

    def on_partial_tool_call(self, call):
        self._record("partial_tool", call)

    def on_complete_tool_call(self, call):
        self._record("complete_tool", call)

    def on_complete_response(self, response):
        try:
            self._record("complete", response)
        finally:
            self.done.set()

    def on_error(self, error):
        self.errors.append(error)
        self.events.append(("error", error))
        if self._raise_in_on_error:
            raise RuntimeError("on_error failed")

    def of(self, kind: str) -> List[Any]:
        return [v for k, v in self.events if k == kind]

    def kinds(self) -> List[str]:
        return [k for k, _ in self.events]


class RotatingAuthenticator(Authenticator):
    """Serves ``tok-1``; each invalidation of the current token bumps it."""

    def __init__(self) -> None:
        self.generation = 1
        self.invalidated: List[Optional[str]] = []
        self._lock = threading.Lock()

    def token(self) -> str:
        with self._lock:
            return f"tok-{self.generation}"

    def invalidate(self, stale: Optional[str] = None) -> None:
        with self._lock:
            self.invalidated.append(stale)
            if stale is None or stale == f"tok-{self.generation}":
                self.generation += 1


def make_service(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    authenticator: Optional[Authenticator] = None,
    **kwargs: Any,
) -> ChatService:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    kwargs.setdefault("model_id", "ibm/granite-3-8b-instruct")
    kwargs.setdefault("project_id", "project-1")
    kwargs.setdefault("retry_config", RetryConfig())
    return ChatService(
        authenticator or RotatingAuthenticator(),
        base_url="https://us-south.ml.cloud.ibm.com",
        http_client=client,
        **kwargs,
    )
