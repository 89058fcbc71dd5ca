"""
Request validation and wire payload construction.

Shared by the blocking and streaming paths. Everything here raises
``ValueError`` for configuration mistakes, before any I/O happens.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from .models import ChatParameters, ChatRequest, Tool

# parameters that route the request rather than shape the completion
_ROUTING_FIELDS = frozenset({"model_id", "project_id", "space_id", "transaction_id"})


def validate_request(request: ChatRequest) -> None:
    if request.has_control_message and request.extraction_tags is None:
        raise ValueError("extraction tags are required when using control messages")


def merge_parameters(
    defaults: Optional[ChatParameters], overrides: Optional[ChatParameters]
) -> ChatParameters:
    """Overlay the set fields of ``overrides`` on ``defaults``."""
    merged: Dict[str, Any] = defaults.model_dump(exclude_none=True) if defaults else {}
    if overrides is not None:
        merged.update(overrides.model_dump(exclude_none=True))
    return ChatParameters(**merged)


def tool_has_parameters(tools: Optional[Iterable[Tool]]) -> Dict[str, bool]:
    return {t.function.name: t.has_parameters for t in tools or ()}


def build_payload(
    request: ChatRequest,
    *,
    model_id: Optional[str] = None,
    project_id: Optional[str] = None,
    space_id: Optional[str] = None,
    default_parameters: Optional[ChatParameters] = None,
) -> Dict[str, Any]:
    """Return the JSON body for the chat endpoints.

    Request parameters win over ``default_parameters``, which win over the
    service-level ``model_id`` / ``project_id`` / ``space_id``. Project and
    space are resolved as a pair: if the request names either, the service
    values are not used.
    """
    validate_request(request)
    params = merge_parameters(default_parameters, request.parameters)

    model = params.model_id or model_id
    if not model:
        raise ValueError("model_id must be provided")
    if params.project_id or params.space_id:
        project_id, space_id = params.project_id, params.space_id
    if not project_id and not space_id:
        raise ValueError("either project_id or space_id must be provided")

    payload: Dict[str, Any] = {"model_id": model}
    if project_id:
        payload["project_id"] = project_id
    if space_id:
        payload["space_id"] = space_id
    payload["messages"] = [m.model_dump(mode="json", exclude_none=True) for m in request.messages]
    if request.tools:
        payload["tools"] = [t.model_dump(mode="json", exclude_none=True) for t in request.tools]
    payload.update(params.model_dump(mode="json", exclude_none=True, exclude=set(_ROUTING_FIELDS)))

    thinking = request.thinking
    if thinking is not None:
        if thinking.is_enabled is not None:
            payload["chat_template_kwargs"] = {"thinking": thinking.is_enabled}
        if thinking.include_reasoning is not None:
            payload["include_reasoning"] = thinking.include_reasoning
        if thinking.effort is not None:
            payload["reasoning_effort"] = thinking.effort.value
    return payload


__all__ = ["validate_request", "merge_parameters", "tool_has_parameters", "build_payload"]
