"""
Chat service facade.

:class:`ChatService` is the public entry point:

- :meth:`ChatService.chat` sends a blocking request and returns the
  :class:`ChatResponse` after the message and tool interceptors ran.
- :meth:`ChatService.chat_streaming` returns a :class:`StreamingCall`
  immediately and reports progress to a :class:`ChatHandler`.

Both paths validate and build the request body synchronously, so
configuration mistakes raise ``ValueError`` in the caller's thread before
anything is sent, and both establish the request under the same
retry/re-authentication policy.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional, Sequence, Union

import httpx

from ..auth import Authenticator, IAMAuthenticator
from ..base.errors import WatsonxError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.resilience import RetryConfig, call_with_retry
from ..config import ClientConfig, defaults, get_client_config
from .handler import ChatHandler
from .interceptors import InterceptorPipeline, MessageInterceptor, ToolInterceptor
from .models import ChatMessage, ChatParameters, ChatRequest, ChatResponse, ExtractionTags
from .request_builder import build_payload, merge_parameters
from .session import StreamingCall, StreamingChatSession
from .transport import ChatTransport

logger = get_logger(__name__)

RequestLike = Union[ChatRequest, Sequence[ChatMessage]]


def _as_request(request: RequestLike) -> ChatRequest:
    if isinstance(request, ChatRequest):
        return request
    return ChatRequest(messages=list(request))


def separate_thinking(response: ChatResponse, tags: Optional[ExtractionTags]) -> ChatResponse:
    """Split tagged content of every choice into content and reasoning."""
    if tags is None:
        return response
    choices = []
    for choice in response.choices:
        raw = choice.message.content
        if raw:
            update = {"content": tags.extract_response(raw)}
            thinking = tags.extract_thinking(raw)
            if thinking is not None:
                update["reasoning_content"] = thinking
            choice = choice.model_copy(update={"message": choice.message.model_copy(update=update)})
        choices.append(choice)
    return response.model_copy(update={"choices": choices})


class ChatService:
    """Client for the text chat endpoints of one deployment region.

    Args:
        authenticator: bearer token provider.
        base_url: service root, e.g. ``https://us-south.ml.cloud.ibm.com``.
        model_id / project_id / space_id: defaults for requests that do not
            set them in their parameters.
        default_parameters: parameters applied under every request's own.
        message_interceptor / tool_interceptor: optional rewrite hooks.
        retry_config: retry budgets; defaults honor ``WATSONX_RETRY_*``.
        http_client: client to send through instead of the shared pool.
    """

    def __init__(
        self,
        authenticator: Authenticator,
        *,
        base_url: str = defaults.DEFAULT_BASE_URL,
        api_version: str = defaults.DEFAULT_API_VERSION,
        model_id: Optional[str] = None,
        project_id: Optional[str] = None,
        space_id: Optional[str] = None,
        default_parameters: Optional[ChatParameters] = None,
        message_interceptor: Optional[MessageInterceptor] = None,
        tool_interceptor: Optional[ToolInterceptor] = None,
        retry_config: Optional[RetryConfig] = None,
        http_client: Optional[httpx.Client] = None,
        log_requests: bool = False,
        log_responses: bool = False,
    ) -> None:
        self.authenticator = authenticator
        self.model_id = model_id
        self.project_id = project_id
        self.space_id = space_id
        self.default_parameters = default_parameters
        self.pipeline = InterceptorPipeline(message_interceptor, tool_interceptor)
        self.retry_config = retry_config or RetryConfig.from_env()
        self.transport = ChatTransport(
            base_url=base_url,
            api_version=api_version,
            http_client=http_client,
            log_requests=log_requests,
            log_responses=log_responses,
        )

    @classmethod
    def from_config(cls, config: Optional[ClientConfig] = None, **kwargs) -> "ChatService":
        """Build a service authenticating with the configured IAM API key."""
        config = config or get_client_config()
        if not config.api_key:
            raise ValueError("an API key is required (set WATSONX_API_KEY)")
        authenticator = IAMAuthenticator(config.api_key, url=config.iam_url, http_client=kwargs.get("http_client"))
        options = {
            "base_url": config.base_url,
            "api_version": config.api_version,
            "model_id": config.model_id,
            "project_id": config.project_id,
            "space_id": config.space_id,
            "log_requests": config.log_requests,
            "log_responses": config.log_responses,
        }
        options.update(kwargs)
        return cls(authenticator, **options)

    # ---- blocking -----------------------------------------------------

    def chat(self, request: RequestLike) -> ChatResponse:
        """Send ``request`` and return the intercepted response."""
        request = self._resolve(_as_request(request))
        response = self._send(request)
        if self.pipeline.is_empty:
            return response
        ctx = self.pipeline.context(request, self._invoke, response)
        response = self.pipeline.apply_message(ctx, response)
        return self.pipeline.apply_tools(ctx, response)

    def _invoke(self, request: ChatRequest) -> ChatResponse:
        return self._send(request)

    def _send(self, request: ChatRequest) -> ChatResponse:
        request = self._resolve(request)
        payload = self._payload(request)
        ctx = self._log_context(payload, request)
        used: dict = {}

        def attempt() -> dict:
            token = self.authenticator.token()
            used["token"] = token
            return self.transport.post_chat(payload, token, request.transaction_id, ctx)

        data = call_with_retry(
            attempt,
            self._retry_config_for(ctx),
            on_token_expired=lambda e: self.authenticator.invalidate(used.get("token")),
        )
        response = separate_thinking(ChatResponse.model_validate(data), request.extraction_tags)
        normalized_log_event(
            logger, "chat.complete", ctx.with_completion(response.id),
            phase="finalize", attempt=None, emitted=True, tokens=response.usage,
        )
        return response

    # ---- streaming ----------------------------------------------------

    def chat_streaming(self, request: RequestLike, handler: ChatHandler) -> StreamingCall:
        """Start a streaming call and return its future without blocking."""
        request = self._resolve(_as_request(request))
        payload = self._payload(request)
        ctx = self._log_context(payload, request)
        session = StreamingChatSession(
            request=request,
            payload=payload,
            transport=self.transport,
            authenticator=self.authenticator,
            handler=handler,
            retry_config=self._retry_config_for(ctx),
            pipeline=self.pipeline,
            invoker=self._invoke,
            ctx=ctx,
        )
        return session.start()

    # ---- helpers ------------------------------------------------------

    def _resolve(self, request: ChatRequest) -> ChatRequest:
        """Return ``request`` with the service default parameters folded in."""
        if self.default_parameters is None:
            return request
        return request.with_changes(parameters=merge_parameters(self.default_parameters, request.parameters))

    def _payload(self, request: ChatRequest) -> dict:
        return build_payload(
            request,
            model_id=self.model_id,
            project_id=self.project_id,
            space_id=self.space_id,
            default_parameters=self.default_parameters,
        )

    @staticmethod
    def _log_context(payload: dict, request: ChatRequest) -> LogContext:
        return LogContext(model_id=payload.get("model_id"), transaction_id=request.transaction_id)

    def _retry_config_for(self, ctx: LogContext) -> RetryConfig:
        """Wrap the configured attempt logger with ``chat.retry`` logging."""
        user_logger = self.retry_config.attempt_logger

        def log_attempt(*, attempt: int, reason: Optional[str], error: Optional[WatsonxError]) -> None:
            if reason is not None and error is not None:
                normalized_log_event(
                    logger, "chat.retry", ctx,
                    phase="start", attempt=attempt + 1, error_code=error.code.value,
                    emitted=False, tokens=None, level=logging.WARNING, reason=reason,
                )
            if user_logger is not None:
                user_logger(attempt=attempt, reason=reason, error=error)

        return dataclasses.replace(self.retry_config, attempt_logger=log_attempt)


__all__ = ["ChatService", "separate_thinking"]
