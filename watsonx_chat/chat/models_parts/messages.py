"""
Chat messages.

One pydantic model per role, discriminated by ``role`` so a request body can
be validated back into the right message types. The ``control`` role carries
the ``thinking`` switch understood by reasoning models; it is only valid
together with extraction tags (see ``request_builder.validate_request``).
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .tools import ToolCall


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class SystemMessage(_Message):
    role: Literal["system"] = "system"
    content: str
    name: Optional[str] = None

    @classmethod
    def of(cls, content: str) -> "SystemMessage":
        return cls(content=content)


class UserMessage(_Message):
    """User turn; ``content`` is plain text or a list of content parts."""

    role: Literal["user"] = "user"
    content: Union[str, List[Dict[str, Any]]]
    name: Optional[str] = None

    @classmethod
    def text(cls, content: str) -> "UserMessage":
        return cls(content=content)


class AssistantMessage(_Message):
    role: Literal["assistant"] = "assistant"
    content: Optional[str] = None
    reasoning_content: Optional[str] = None
    refusal: Optional[str] = None
    name: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None


class ToolMessage(_Message):
    role: Literal["tool"] = "tool"
    content: str
    tool_call_id: str


class ControlMessage(_Message):
    role: Literal["control"] = "control"
    content: str = "thinking"


ChatMessage = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage, ControlMessage],
    Field(discriminator="role"),
]


__all__ = [
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "ToolMessage",
    "ControlMessage",
    "ChatMessage",
]
