"""Unified configuration layer for the client.

Goals
-----
* Centralize defaults (base URL, API version, header names, retry ceilings).
* Merge sources in a predictable order:
    1. Built-in defaults
    2. Environment variables (``WATSONX_URL``, ``WATSONX_API_KEY``, ...)
    3. Optional external config file (JSON or YAML) pointed to by
       ``WATSONX_CONFIG_FILE``
    4. In-code overrides passed to :func:`get_client_config`
* Provide a single call site returning an immutable :class:`ClientConfig`.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML. Keys mirror :class:`ClientConfig` fields::

    base_url: https://eu-de.ml.cloud.ibm.com
    project_id: 0a1b...
    model_id: ibm/granite-3-8b-instruct
    log_responses: true

Unknown keys are ignored.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from . import defaults
from .env import env_bool, read_env_fields


@dataclass(frozen=True)
class ClientConfig:
    """Resolved connection settings for a chat service."""

    base_url: str = defaults.DEFAULT_BASE_URL
    api_version: str = defaults.DEFAULT_API_VERSION
    api_key: Optional[str] = None
    project_id: Optional[str] = None
    space_id: Optional[str] = None
    model_id: Optional[str] = None
    iam_url: str = defaults.IAM_DEFAULT_URL
    log_requests: bool = False
    log_responses: bool = False

    def __repr__(self) -> str:  # pragma: no cover - keeps secrets out of logs
        masked = "***" if self.api_key else None
        return (
            f"ClientConfig(base_url={self.base_url!r}, api_version={self.api_version!r}, "
            f"api_key={masked!r}, project_id={self.project_id!r}, space_id={self.space_id!r}, "
            f"model_id={self.model_id!r})"
        )


_FIELD_NAMES = frozenset(f.name for f in fields(ClientConfig))


def _load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a JSON or YAML mapping from ``path``; empty when unset.

    Raises ``ValueError`` when the file exists but is not a mapping, so a
    broken config file is not silently ignored.
    """
    if not path:
        return {}
    text = Path(path).expanduser().read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    return {k: v for k, v in data.items() if k in _FIELD_NAMES}


def get_client_config(**overrides: Any) -> ClientConfig:
    """Resolve a :class:`ClientConfig` from defaults, env, file and overrides."""
    merged: Dict[str, Any] = {}
    merged.update(read_env_fields())
    merged["log_requests"] = env_bool(defaults.ENV_LOG_REQUESTS)
    merged["log_responses"] = env_bool(defaults.ENV_LOG_RESPONSES)
    merged.update(_load_config_file(os.getenv(defaults.ENV_CONFIG_FILE)))
    unknown = set(overrides) - _FIELD_NAMES
    if unknown:
        raise ValueError(f"unknown config fields: {sorted(unknown)}")
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return ClientConfig(**merged)


__all__ = ["ClientConfig", "get_client_config", "defaults"]
