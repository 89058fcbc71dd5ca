"""watsonx_chat.config.env
========================

Environment variable helpers for the client.

Purpose
-------
- Resolve the ``WATSONX_*`` variables in one place with consistent parsing
  (trimmed strings, integers, booleans).
- Detect placeholder values copied from examples so they are treated as
  unset rather than sent to the service.

Failure Modes
-------------
- Helpers never raise on unset or malformed variables; they return ``None``
  or the supplied default and callers decide how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

from . import defaults

# ClientConfig field -> environment variable
ENV_FIELD_MAP: Dict[str, str] = {
    "base_url": defaults.ENV_URL,
    "api_key": defaults.ENV_API_KEY,  # pragma: allowlist secret - field name, not a secret
    "project_id": defaults.ENV_PROJECT_ID,
    "space_id": defaults.ENV_SPACE_ID,
    "model_id": defaults.ENV_MODEL_ID,
    "api_version": defaults.ENV_API_VERSION,
}

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the value looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    '<' (template markers such as ``<your-api-key>``). Case-insensitive.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "example" in v or v.startswith("<")


def env_str(name: str) -> Optional[str]:
    """Return a trimmed, non-placeholder environment value or ``None``."""
    raw = os.getenv(name)
    if raw is None:
        return None
    val = raw.strip()
    if not val or is_placeholder(val):
        return None
    return val


def env_int(name: str, default: int) -> int:
    """Parse a non-negative integer variable, falling back to ``default``."""
    raw = env_str(name)
    if raw is None:
        return default
    try:
        val = int(raw)
    except ValueError:
        return default
    return val if val >= 0 else default


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean variable (1/0, true/false, yes/no, on/off)."""
    raw = env_str(name)
    if raw is None:
        return default
    low = raw.lower()
    if low in _TRUE:
        return True
    if low in _FALSE:
        return False
    return default


def read_env_fields() -> Dict[str, str]:
    """Return the ``ClientConfig`` fields that are set in the environment."""
    out: Dict[str, str] = {}
    for field_name, var in ENV_FIELD_MAP.items():
        val = env_str(var)
        if val is not None:
            out[field_name] = val
    return out


__all__ = [
    "ENV_FIELD_MAP",
    "is_placeholder",
    "env_str",
    "env_int",
    "env_bool",
    "read_env_fields",
]
