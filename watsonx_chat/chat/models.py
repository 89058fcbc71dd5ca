"""Chat data model public surface.

Re-exports the request, response, streaming chunk and tool-call event types
defined under ``watsonx_chat.chat.models_parts``.
"""

from .models_parts.extraction_tags import ExtractionTags
from .models_parts.finish_reason import FinishReason
from .models_parts.messages import (
    AssistantMessage,
    ChatMessage,
    ControlMessage,
    SystemMessage,
    ToolMessage,
    UserMessage,
)
from .models_parts.parameters import ChatParameters, Thinking, ThinkingEffort, ToolChoiceOption
from .models_parts.partial import (
    Delta,
    PartialChatResponse,
    PartialChoice,
    PartialFunction,
    PartialToolCallDelta,
)
from .models_parts.request import ChatRequest
from .models_parts.response import ChatResponse, ResultChoice, ResultMessage, Usage
from .models_parts.tool_events import CompletedToolCall, PartialToolCall
from .models_parts.tools import FunctionCall, FunctionDefinition, Tool, ToolCall

__all__ = [
    "ExtractionTags",
    "FinishReason",
    "AssistantMessage",
    "ChatMessage",
    "ControlMessage",
    "SystemMessage",
    "ToolMessage",
    "UserMessage",
    "ChatParameters",
    "Thinking",
    "ThinkingEffort",
    "ToolChoiceOption",
    "Delta",
    "PartialChatResponse",
    "PartialChoice",
    "PartialFunction",
    "PartialToolCallDelta",
    "ChatRequest",
    "ChatResponse",
    "ResultChoice",
    "ResultMessage",
    "Usage",
    "CompletedToolCall",
    "PartialToolCall",
    "FunctionCall",
    "FunctionDefinition",
    "Tool",
    "ToolCall",
]
