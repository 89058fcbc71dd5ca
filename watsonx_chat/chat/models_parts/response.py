"""Final (aggregated) chat response."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .finish_reason import FinishReason
from .messages import AssistantMessage
from .tools import ToolCall


class Usage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    completion_tokens: Optional[int] = None
    prompt_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ResultMessage(BaseModel):
    """Assistant output of one choice.

    ``content`` is the visible answer and ``reasoning_content`` the thinking,
    already separated when extraction tags were configured.
    """

    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = "assistant"
    content: Optional[str] = None
    reasoning_content: Optional[str] = None
    refusal: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None


class ResultChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: ResultMessage = Field(default_factory=ResultMessage)
    finish_reason: Optional[str] = None


class ChatResponse(BaseModel):
    """Complete response of one chat call (streamed or not)."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    id: Optional[str] = None
    object: Optional[str] = None
    model_id: Optional[str] = None
    model: Optional[str] = None
    model_version: Optional[str] = None
    created: Optional[int] = None
    created_at: Optional[str] = None
    choices: List[ResultChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    def _first(self) -> Optional[ResultChoice]:
        return self.choices[0] if self.choices else None

    def finish_reason(self) -> Optional[FinishReason]:
        choice = self._first()
        return FinishReason.parse(choice.finish_reason) if choice else None

    def extract_content(self) -> Optional[str]:
        """Visible answer of the first choice."""
        choice = self._first()
        return choice.message.content if choice else None

    def extract_thinking(self) -> Optional[str]:
        """Reasoning text of the first choice, if the model produced any."""
        choice = self._first()
        return choice.message.reasoning_content if choice else None

    def tool_calls(self) -> List[ToolCall]:
        choice = self._first()
        if choice is None or not choice.message.tool_calls:
            return []
        return list(choice.message.tool_calls)

    def to_assistant_message(self) -> AssistantMessage:
        """Build the assistant turn to append to the next request."""
        choice = self._first()
        if choice is None:
            return AssistantMessage()
        msg = choice.message
        return AssistantMessage(
            content=msg.content,
            refusal=msg.refusal,
            reasoning_content=msg.reasoning_content,
            tool_calls=msg.tool_calls or None,
        )


__all__ = ["Usage", "ResultMessage", "ResultChoice", "ChatResponse"]
