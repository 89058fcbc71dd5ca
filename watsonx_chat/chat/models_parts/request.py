"""Immutable chat request."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .extraction_tags import ExtractionTags
from .messages import ChatMessage, ControlMessage
from .parameters import ChatParameters, Thinking, ToolChoiceOption
from .tools import Tool


class ChatRequest(BaseModel):
    """Messages, tools, parameters and reasoning config of one chat call.

    Instances are frozen; :meth:`with_changes` produces the modified copy an
    interceptor sends through ``InterceptorContext.invoke``.
    """

    model_config = ConfigDict(frozen=True)

    messages: List[ChatMessage] = Field(..., min_length=1)
    tools: Optional[List[Tool]] = None
    parameters: Optional[ChatParameters] = None
    thinking: Optional[Thinking] = None

    def with_changes(self, **changes: Any) -> "ChatRequest":
        """Return a validated copy with top-level fields replaced."""
        data = {
            "messages": self.messages,
            "tools": self.tools,
            "parameters": self.parameters,
            "thinking": self.thinking,
        }
        data.update(changes)
        return ChatRequest(**data)

    def with_parameters(self, **changes: Any) -> "ChatRequest":
        """Return a copy whose parameters have ``changes`` applied."""
        base = self.parameters.model_dump(exclude_none=True) if self.parameters else {}
        base.update(changes)
        return self.with_changes(parameters=ChatParameters(**base))

    @property
    def extraction_tags(self) -> Optional[ExtractionTags]:
        return self.thinking.extraction_tags if self.thinking else None

    @property
    def tool_choice_option(self) -> Optional[ToolChoiceOption]:
        return self.parameters.tool_choice_option if self.parameters else None

    @property
    def transaction_id(self) -> Optional[str]:
        return self.parameters.transaction_id if self.parameters else None

    @property
    def has_control_message(self) -> bool:
        return any(isinstance(m, ControlMessage) for m in self.messages)


__all__ = ["ChatRequest"]
