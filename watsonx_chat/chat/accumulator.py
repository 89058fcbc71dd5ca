"""
Delta accumulator.

Folds the decoded chunks of one stream into tool calls and a final
:class:`ChatResponse`, reporting progress to an :class:`AccumulatorListener`
as it goes. State machine::

    AWAITING_FIRST_EVENT -> ACCUMULATING -> FINALIZED

Tool-call fragments are kept in one slot per ``(choice, index)``. A choice
has at most one open slot: the first fragment of a new index closes the
previous one, which is then reported complete exactly once. Fragments that
arrive later for an already closed index are still folded into its
arguments and reported as partials, but never completed a second time.

Scalars such as ``id``, ``model_id`` or ``finish_reason`` are sparse across
chunks; the last non-null value wins. ``usage`` arrives on a terminal chunk
with no choices, which finalizes the stream.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

from ..base.logging import get_logger
from .models import (
    ChatResponse,
    CompletedToolCall,
    ExtractionTags,
    FunctionCall,
    PartialChatResponse,
    PartialChoice,
    PartialToolCall,
    PartialToolCallDelta,
    ResultChoice,
    ResultMessage,
    ToolCall,
    ToolChoiceOption,
    Usage,
)
from .splitter import Segment, SegmentKind, ThinkingContentSplitter

logger = get_logger(__name__)

_TOOL_CALLS = "tool_calls"


class AccumulatorState(str, Enum):
    AWAITING_FIRST_EVENT = "awaiting_first_event"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"


class AccumulatorListener(Protocol):
    def on_partial_response(self, text: str, chunk: Optional[PartialChatResponse]) -> None: ...

    def on_partial_thinking(self, text: str, chunk: Optional[PartialChatResponse]) -> None: ...

    def on_partial_tool_call(self, call: PartialToolCall) -> None: ...

    def on_complete_tool_call(self, call: CompletedToolCall) -> None: ...

    def on_complete_response(self, response: ChatResponse) -> None: ...


@dataclass
class ToolCallSlot:
    """Merge buffer for one tool-call index."""

    choice_index: int
    index: int
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: List[str] = field(default_factory=list)
    closed: bool = False

    def merge(self, fragment: PartialToolCallDelta) -> str:
        """Fold a fragment in and return its raw argument increment."""
        if fragment.id and fragment.id.strip():
            self.id = fragment.id
        fn = fragment.function
        if fn is None:
            return ""
        if fn.name:
            self.name = fn.name
        increment = fn.arguments or ""
        if increment:
            self.arguments.append(increment)
        return increment

    def build(self, synthesize_id: bool = False) -> ToolCall:
        if synthesize_id and not self.id:
            self.id = uuid.uuid4().hex
        args = "".join(self.arguments)
        return ToolCall(
            index=self.index,
            id=self.id,
            function=FunctionCall(name=self.name, arguments=args or "{}"),
        )


@dataclass
class _ChoiceState:
    index: int
    splitter: ThinkingContentSplitter
    role: Optional[str] = None
    refusal: Optional[str] = None
    finish_reason: Optional[str] = None
    content: List[str] = field(default_factory=list)
    thinking: List[str] = field(default_factory=list)
    slots: Dict[int, ToolCallSlot] = field(default_factory=dict)
    open_index: Optional[int] = None


class DeltaAccumulator:
    """Stateful merger for a single streaming completion.

    Args:
        listener: receives partial and complete events synchronously, in
            the order they are produced.
        extraction_tags: tags separating inline reasoning from the answer.
        tool_has_parameters: tool name to "schema declares parameters";
            tools mapped to ``False`` report ``"{}"`` as partial arguments.
        tool_choice_option: ``REQUIRED`` enables id synthesis and forces
            ``finish_reason`` to ``tool_calls`` when tool calls exist.
    """

    def __init__(
        self,
        listener: AccumulatorListener,
        extraction_tags: Optional[ExtractionTags] = None,
        tool_has_parameters: Optional[Mapping[str, bool]] = None,
        tool_choice_option: Optional[ToolChoiceOption] = None,
    ) -> None:
        self._listener = listener
        self._tags = extraction_tags
        self._tool_has_parameters = dict(tool_has_parameters or {})
        self._required = tool_choice_option == ToolChoiceOption.REQUIRED
        self._state = AccumulatorState.AWAITING_FIRST_EVENT
        self._choices: Dict[int, _ChoiceState] = {}
        self._scalars: Dict[str, object] = {}
        self._usage: Optional[Usage] = None
        self._last_chunk: Optional[PartialChatResponse] = None

    @property
    def state(self) -> AccumulatorState:
        return self._state

    @property
    def completion_id(self) -> Optional[str]:
        return self._scalars.get("id")  # type: ignore[return-value]

    def accept(self, chunk: PartialChatResponse) -> bool:
        """Process one chunk. Returns True when it finalized the stream."""
        if self._state is AccumulatorState.FINALIZED:
            logger.debug("chunk after finalization ignored")
            return False
        self._state = AccumulatorState.ACCUMULATING
        self._last_chunk = chunk
        for name in ("id", "object", "model_id", "model", "model_version", "created", "created_at"):
            value = getattr(chunk, name)
            if value is not None:
                self._scalars[name] = value
        if chunk.usage is not None:
            self._usage = chunk.usage
        for choice in chunk.choices:
            self._accept_choice(chunk, choice)
        if chunk.is_terminal:
            self._finalize()
            return True
        return False

    def finish(self) -> Optional[ChatResponse]:
        """End of stream without a terminal chunk; finalizes if needed."""
        if self._state is AccumulatorState.FINALIZED:
            return None
        return self._finalize()

    def build(self) -> ChatResponse:
        """Assemble the response from everything accumulated so far."""
        choices = [self._build_choice(self._choices[i]) for i in sorted(self._choices)]
        return ChatResponse(choices=choices, usage=self._usage, **self._scalars)

    def _choice(self, index: int) -> _ChoiceState:
        state = self._choices.get(index)
        if state is None:
            state = _ChoiceState(index=index, splitter=ThinkingContentSplitter(self._tags))
            self._choices[index] = state
        return state

    def _accept_choice(self, chunk: PartialChatResponse, choice: PartialChoice) -> None:
        state = self._choice(choice.index)
        delta = choice.delta
        if delta.role is not None:
            state.role = delta.role
        if delta.refusal is not None:
            state.refusal = delta.refusal
        for fragment in delta.tool_calls or ():
            self._accept_tool_fragment(state, fragment)
        if delta.content:
            self._emit_segments(state, state.splitter.feed(delta.content), chunk)
        if delta.reasoning_content:
            state.thinking.append(delta.reasoning_content)
            self._listener.on_partial_thinking(delta.reasoning_content, chunk)
        if choice.finish_reason is not None:
            state.finish_reason = choice.finish_reason
            if choice.finish_reason == _TOOL_CALLS:
                self._close_open_slot(state)

    def _accept_tool_fragment(self, state: _ChoiceState, fragment: PartialToolCallDelta) -> None:
        slot = state.slots.get(fragment.index)
        if slot is None:
            self._close_open_slot(state)
            slot = ToolCallSlot(choice_index=state.index, index=fragment.index)
            state.slots[fragment.index] = slot
            state.open_index = fragment.index
        elif slot.closed:
            logger.debug(
                "late fragment for closed tool call index %s (choice %s)", fragment.index, state.index
            )
        increment = slot.merge(fragment)
        if fragment.function is None:
            return
        if self._tool_has_parameters.get(slot.name or "", True) is False:
            increment = "{}"
        if increment:
            self._listener.on_partial_tool_call(
                PartialToolCall(
                    completion_id=self.completion_id,
                    index=slot.index,
                    id=slot.id,
                    name=slot.name,
                    arguments=increment,
                    choice_index=state.index,
                )
            )

    def _close_open_slot(self, state: _ChoiceState) -> None:
        if state.open_index is None:
            return
        slot = state.slots[state.open_index]
        state.open_index = None
        if slot.closed:
            return
        slot.closed = True
        self._listener.on_complete_tool_call(
            CompletedToolCall(
                completion_id=self.completion_id,
                tool_call=slot.build(synthesize_id=self._required),
                choice_index=state.index,
            )
        )

    def _emit_segments(
        self, state: _ChoiceState, segments: List[Segment], chunk: Optional[PartialChatResponse]
    ) -> None:
        for segment in segments:
            if segment.kind is SegmentKind.THINKING:
                state.thinking.append(segment.text)
                self._listener.on_partial_thinking(segment.text, chunk)
            else:
                state.content.append(segment.text)
                self._listener.on_partial_response(segment.text, chunk)

    def _finalize(self) -> ChatResponse:
        for index in sorted(self._choices):
            state = self._choices[index]
            self._emit_segments(state, state.splitter.flush(), self._last_chunk)
            self._close_open_slot(state)
        self._state = AccumulatorState.FINALIZED
        response = self.build()
        self._listener.on_complete_response(response)
        return response

    def _build_choice(self, state: _ChoiceState) -> ResultChoice:
        tool_calls = [
            state.slots[i].build(synthesize_id=self._required) for i in sorted(state.slots)
        ]
        finish_reason = state.finish_reason
        if self._required and tool_calls and finish_reason != _TOOL_CALLS:
            finish_reason = _TOOL_CALLS
        content: Optional[str] = "".join(state.content)
        if not content and tool_calls:
            content = None
        message = ResultMessage(
            role=state.role or "assistant",
            content=content,
            reasoning_content="".join(state.thinking) or None,
            refusal=state.refusal,
            tool_calls=tool_calls or None,
        )
        return ResultChoice(index=state.index, message=message, finish_reason=finish_reason)


def slot_key(call: CompletedToolCall) -> Tuple[int, Optional[int]]:
    """Key identifying a completed tool call within its response."""
    return call.choice_index, call.tool_call.index


__all__ = [
    "AccumulatorState",
    "AccumulatorListener",
    "ToolCallSlot",
    "DeltaAccumulator",
    "slot_key",
]
