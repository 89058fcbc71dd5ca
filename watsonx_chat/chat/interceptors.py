"""
Message and tool interceptors.

Both hooks are plain callables receiving an :class:`InterceptorContext`:

- ``MessageInterceptor(context, text) -> text`` rewrites the final answer
  text (once per response; partial text already delivered is not retracted).
- ``ToolInterceptor(context, call) -> call`` rewrites one completed
  ``FunctionCall``. In a stream it runs when the call is first reported
  complete; fragments arriving for that index afterwards are not passed
  through it again, and the intercepted call is what the final response keeps.

``context.invoke(request)`` performs a complete, blocking, non-streaming
chat call without any interceptors, so a hook can ask the model a follow-up
question before answering. A hook that wants interceptors on that secondary
call must arrange it explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from ..base.logging import get_logger
from .models import ChatRequest, ChatResponse, FunctionCall, ToolCall

logger = get_logger(__name__)


@dataclass(frozen=True)
class InterceptorContext:
    """Request (and response, when already assembled) seen by a hook."""

    request: ChatRequest
    response: Optional[ChatResponse]
    invoker: Callable[[ChatRequest], ChatResponse]

    def invoke(self, request: ChatRequest) -> ChatResponse:
        return self.invoker(request)


MessageInterceptor = Callable[[InterceptorContext, str], str]
ToolInterceptor = Callable[[InterceptorContext, FunctionCall], FunctionCall]


@dataclass(frozen=True)
class InterceptorPipeline:
    """The two optional hooks of a service, applied in a fixed order."""

    message_interceptor: Optional[MessageInterceptor] = None
    tool_interceptor: Optional[ToolInterceptor] = None

    @property
    def is_empty(self) -> bool:
        return self.message_interceptor is None and self.tool_interceptor is None

    def context(
        self,
        request: ChatRequest,
        invoker: Callable[[ChatRequest], ChatResponse],
        response: Optional[ChatResponse] = None,
    ) -> InterceptorContext:
        return InterceptorContext(request=request, response=response, invoker=invoker)

    def apply_message(self, ctx: InterceptorContext, response: ChatResponse) -> ChatResponse:
        """Rewrite the content of every choice that has some."""
        if self.message_interceptor is None:
            return response
        ctx = InterceptorContext(request=ctx.request, response=response, invoker=ctx.invoker)
        choices = []
        for choice in response.choices:
            content = choice.message.content
            if content is not None:
                content = self.message_interceptor(ctx, content)
                choice = choice.model_copy(
                    update={"message": choice.message.model_copy(update={"content": content})}
                )
            choices.append(choice)
        return response.model_copy(update={"choices": choices})

    def apply_tool(self, ctx: InterceptorContext, tool_call: ToolCall) -> ToolCall:
        if self.tool_interceptor is None:
            return tool_call
        rewritten = self.tool_interceptor(ctx, tool_call.function)
        logger.debug("tool call %s rewritten by interceptor", tool_call.index)
        return tool_call.with_function(rewritten)

    def apply_tools(self, ctx: InterceptorContext, response: ChatResponse) -> ChatResponse:
        """Rewrite every tool call of a non-streaming response."""
        if self.tool_interceptor is None:
            return response
        ctx = InterceptorContext(request=ctx.request, response=response, invoker=ctx.invoker)
        replaced: Dict[Tuple[int, Optional[int]], ToolCall] = {}
        for choice in response.choices:
            for call in choice.message.tool_calls or ():
                replaced[(choice.index, call.index)] = self.apply_tool(ctx, call)
        return substitute_tool_calls(response, replaced)


def substitute_tool_calls(
    response: ChatResponse, replaced: Dict[Tuple[int, Optional[int]], ToolCall]
) -> ChatResponse:
    """Return ``response`` with tool calls swapped by ``(choice, index)``."""
    if not replaced:
        return response
    choices = []
    for choice in response.choices:
        calls = choice.message.tool_calls
        if calls:
            calls = [replaced.get((choice.index, c.index), c) for c in calls]
            choice = choice.model_copy(
                update={"message": choice.message.model_copy(update={"tool_calls": calls})}
            )
        choices.append(choice)
    return response.model_copy(update={"choices": choices})


__all__ = [
    "InterceptorContext",
    "MessageInterceptor",
    "ToolInterceptor",
    "InterceptorPipeline",
    "substitute_tool_calls",
]
