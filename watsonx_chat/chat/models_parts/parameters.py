"""
Request parameters and reasoning configuration.

``ChatParameters`` holds the per-request options (all optional; unset values
fall back to the service defaults). ``transaction_id`` is not part of the
body: it is sent as the ``X-Global-Transaction-Id`` header.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .extraction_tags import ExtractionTags


class ToolChoiceOption(str, Enum):
    AUTO = "auto"
    NONE = "none"
    REQUIRED = "required"


class ThinkingEffort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ChatParameters(BaseModel):
    """Sampling, formatting and routing options for one request."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: Optional[str] = None
    project_id: Optional[str] = None
    space_id: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_completion_tokens: Optional[int] = Field(default=None, gt=0)
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    seed: Optional[int] = None
    stop: Optional[List[str]] = None
    n: Optional[int] = Field(default=None, gt=0)
    logprobs: Optional[bool] = None
    top_logprobs: Optional[int] = None
    response_format: Optional[Dict[str, Any]] = None
    tool_choice_option: Optional[ToolChoiceOption] = None
    tool_choice: Optional[Dict[str, Any]] = None
    time_limit: Optional[int] = Field(default=None, gt=0)
    transaction_id: Optional[str] = None


class Thinking(BaseModel):
    """Reasoning configuration.

    ``enabled`` is implied when any other field is set. ``extraction_tags``
    applies to models that inline their reasoning in the content; ``effort``
    and ``include_reasoning`` apply to models that stream it separately as
    ``reasoning_content``.
    """

    model_config = ConfigDict(frozen=True)

    enabled: Optional[bool] = None
    include_reasoning: Optional[bool] = None
    extraction_tags: Optional[ExtractionTags] = None
    effort: Optional[ThinkingEffort] = None

    @classmethod
    def of(cls, tags: ExtractionTags) -> "Thinking":
        return cls(extraction_tags=tags)

    @property
    def is_enabled(self) -> Optional[bool]:
        if self.enabled is None and (
            self.include_reasoning is not None or self.extraction_tags is not None or self.effort is not None
        ):
            return True
        return self.enabled


__all__ = ["ToolChoiceOption", "ThinkingEffort", "ChatParameters", "Thinking"]
