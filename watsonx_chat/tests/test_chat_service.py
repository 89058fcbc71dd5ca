"""Blocking chat path of ``ChatService`` against a mock transport."""
from __future__ import annotations

import json
from typing import List

import httpx
import pytest

from watsonx_chat.auth import IAMAuthenticator
from watsonx_chat.base.errors import TransportError, WatsonxError
from watsonx_chat.chat.models import (
    ChatParameters,
    ChatRequest,
    ExtractionTags,
    FunctionCall,
    SystemMessage,
    Thinking,
    Tool,
    UserMessage,
)
from watsonx_chat.chat.service import ChatService

from .helpers import RotatingAuthenticator, error_body, make_service


def _completion(content=None, tool_calls=None, finish_reason="stop", reasoning=None):
    message = {"role": "assistant"}
    if content is not None:
        message["content"] = content
    if reasoning is not None:
        message["reasoning_content"] = reasoning
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    return {
        "id": "chat-9",
        "model_id": "ibm/granite-3-8b-instruct",
        "created": 1749764735,
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
        "usage": {"completion_tokens": 3, "prompt_tokens": 5, "total_tokens": 8},
    }


def _recording(body, calls: List[httpx.Request]):
    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=body)

    return handler


def test_chat_sends_payload_and_parses_response(log_capture):
    calls: List[httpx.Request] = []
    service = make_service(_recording(_completion("Hello!"), calls))
    request = ChatRequest(
        messages=[SystemMessage.of("be brief"), UserMessage.text("hi")],
        parameters=ChatParameters(temperature=0.2, max_completion_tokens=50, transaction_id="tx-42"),
    )

    response = service.chat(request)

    assert response.extract_content() == "Hello!"  # nosec B101
    assert response.finish_reason().value == "stop"  # nosec B101
    (sent,) = calls
    assert sent.url.path == "/ml/v1/text/chat"  # nosec B101
    assert sent.url.params["version"] == "2025-04-23"  # nosec B101
    assert sent.headers["Accept"] == "application/json"  # nosec B101
    assert sent.headers["X-Global-Transaction-Id"] == "tx-42"  # nosec B101
    body = json.loads(sent.content)
    assert body["temperature"] == 0.2 and body["max_completion_tokens"] == 50  # nosec B101
    assert "transaction_id" not in body  # nosec B101
    (done,) = log_capture.named("chat.complete")
    assert done["completion_id"] == "chat-9" and done["tokens"]["total_tokens"] == 8  # nosec B101


def test_chat_accepts_plain_message_list():
    calls: List[httpx.Request] = []
    service = make_service(_recording(_completion("ok"), calls))
    assert service.chat([UserMessage.text("ping")]).extract_content() == "ok"  # nosec B101


def test_extraction_tags_separate_thinking_from_answer():
    raw = "<think>weighing options</think><response>Pick B</response>"
    service = make_service(_recording(_completion(raw), []))
    request = ChatRequest(
        messages=[UserMessage.text("A or B?")],
        thinking=Thinking.of(ExtractionTags.of("think", "response")),
    )
    response = service.chat(request)
    assert response.extract_content() == "Pick B"  # nosec B101
    assert response.extract_thinking() == "weighing options"  # nosec B101


def test_message_interceptor_sees_request_and_response():
    seen = []

    def interceptor(ctx, text):
        seen.append((ctx.request.messages[0].content, ctx.response.id))
        return text.replace("colour", "color")

    service = make_service(_recording(_completion("nice colour"), []), message_interceptor=interceptor)
    response = service.chat([UserMessage.text("describe")])

    assert response.extract_content() == "nice color"  # nosec B101
    assert seen == [("describe", "chat-9")]  # nosec B101


def test_tool_interceptor_invoke_does_not_reenter_interceptors():
    first = _completion(tool_calls=[
        {"id": "c1", "type": "function", "function": {"name": "lookup", "arguments": '{"id": "7"}'}}
    ], finish_reason="tool_calls")
    second = _completion("normalized: 0007")
    bodies = [first, second]
    calls: List[httpx.Request] = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=bodies[len(calls) - 1])

    invocations = []

    def interceptor(ctx, call: FunctionCall) -> FunctionCall:
        invocations.append(call.name)
        follow = ctx.invoke(ctx.request.with_changes(messages=[UserMessage.text("normalize 7")]))
        return FunctionCall(name=call.name, arguments=json.dumps({"id": follow.extract_content().split()[-1]}))

    tools = [Tool.of("lookup", parameters={"type": "object", "properties": {"id": {"type": "string"}}})]
    service = make_service(handler, tool_interceptor=interceptor)
    response = service.chat(ChatRequest(messages=[UserMessage.text("find 7")], tools=tools))

    assert invocations == ["lookup"]  # nosec B101
    assert len(calls) == 2  # nosec B101
    assert response.tool_calls()[0].function.arguments == '{"id": "0007"}'  # nosec B101
    assert response.tool_calls()[0].id == "c1"  # nosec B101


def test_request_parameters_override_service_defaults():
    calls: List[httpx.Request] = []
    service = make_service(
        _recording(_completion("x"), calls),
        default_parameters=ChatParameters(temperature=0.9, max_completion_tokens=10),
    )
    service.chat(ChatRequest(
        messages=[UserMessage.text("x")],
        parameters=ChatParameters(temperature=0.1, space_id="space-3"),
    ))
    body = json.loads(calls[0].content)
    assert body["temperature"] == 0.1 and body["max_completion_tokens"] == 10  # nosec B101
    assert body["space_id"] == "space-3" and "project_id" not in body  # nosec B101


def test_default_transaction_id_is_sent_as_header(log_capture):
    calls: List[httpx.Request] = []
    service = make_service(
        _recording(_completion("x"), calls),
        default_parameters=ChatParameters(transaction_id="tx-default", temperature=0.3),
    )
    service.chat(ChatRequest(messages=[UserMessage.text("x")]))
    (sent,) = calls
    assert sent.headers["X-Global-Transaction-Id"] == "tx-default"  # nosec B101
    body = json.loads(sent.content)
    assert body["temperature"] == 0.3 and "transaction_id" not in body  # nosec B101
    (done,) = log_capture.named("chat.complete")
    assert done["transaction_id"] == "tx-default"  # nosec B101


def test_missing_model_raises_before_sending():
    calls: List[httpx.Request] = []
    service = make_service(_recording(_completion("x"), calls), model_id=None)
    with pytest.raises(ValueError, match="model_id"):
        service.chat([UserMessage.text("x")])
    assert calls == []  # nosec B101


def test_expired_token_is_refreshed_once():
    calls: List[httpx.Request] = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(401, json=error_body(401, "authentication_token_expired", "expired"))
        return httpx.Response(200, json=_completion("again"))

    auth = RotatingAuthenticator()
    response = make_service(handler, authenticator=auth).chat([UserMessage.text("x")])
    assert response.extract_content() == "again"  # nosec B101
    assert auth.invalidated == ["tok-1"]  # nosec B101
    assert calls[1].headers["Authorization"] == "Bearer tok-2"  # nosec B101


def test_second_expiry_is_not_retried_again():
    def handler(request):
        return httpx.Response(401, json=error_body(401, "authentication_token_expired", "expired"))

    with pytest.raises(WatsonxError) as info:
        make_service(handler).chat([UserMessage.text("x")])
    assert info.value.is_token_expired()  # nosec B101


def test_connection_failure_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError):
        make_service(handler).chat([UserMessage.text("x")])


def test_from_config_requires_api_key():
    with pytest.raises(ValueError, match="API key"):
        ChatService.from_config()


def test_from_config_authenticates_with_iam(monkeypatch):
    monkeypatch.setenv("WATSONX_API_KEY", "k-123")
    monkeypatch.setenv("WATSONX_PROJECT_ID", "proj-env")
    monkeypatch.setenv("WATSONX_MODEL_ID", "ibm/granite-13b-chat")
    seen: List[httpx.Request] = []

    def handler(request):
        seen.append(request)
        if request.url.host == "iam.cloud.ibm.com":
            return httpx.Response(200, json={"access_token": "iam-tok", "expiration": 4102444800})
        return httpx.Response(200, json=_completion("from iam"))

    client = httpx.Client(transport=httpx.MockTransport(handler))
    service = ChatService.from_config(http_client=client)

    assert isinstance(service.authenticator, IAMAuthenticator)  # nosec B101
    assert service.chat([UserMessage.text("x")]).extract_content() == "from iam"  # nosec B101
    iam, chat = seen
    assert b"apikey=k-123" in iam.content  # nosec B101
    assert chat.headers["Authorization"] == "Bearer iam-tok"  # nosec B101
    body = json.loads(chat.content)
    assert body["project_id"] == "proj-env" and body["model_id"] == "ibm/granite-13b-chat"  # nosec B101
