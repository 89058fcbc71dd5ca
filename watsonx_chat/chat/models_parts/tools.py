"""Tool schemas and tool calls exchanged with the chat endpoint."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class FunctionDefinition(BaseModel):
    """Function schema advertised to the model."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


class Tool(BaseModel):
    """A callable tool (only ``function`` tools exist upstream)."""

    type: Literal["function"] = "function"
    function: FunctionDefinition

    @classmethod
    def of(cls, name: str, description: Optional[str] = None, parameters: Optional[Dict[str, Any]] = None) -> "Tool":
        return cls(function=FunctionDefinition(name=name, description=description, parameters=parameters))

    @property
    def has_parameters(self) -> bool:
        """Whether the schema declares at least one parameter."""
        params = self.function.parameters
        if not params:
            return False
        props = params.get("properties")
        return props is None or bool(props)


class FunctionCall(BaseModel):
    """Function name plus JSON-encoded arguments string."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    arguments: str = ""


class ToolCall(BaseModel):
    """A complete tool call emitted by the model."""

    model_config = ConfigDict(extra="ignore")

    index: Optional[int] = None
    id: Optional[str] = None
    type: Literal["function"] = "function"
    function: FunctionCall

    def with_function(self, function: FunctionCall) -> "ToolCall":
        return self.model_copy(update={"function": function})


__all__ = ["FunctionDefinition", "Tool", "FunctionCall", "ToolCall"]
