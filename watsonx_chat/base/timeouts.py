"""Unified timeout configuration for the chat client.

Centralizes the timeout values used by the HTTP transport (one-shot chat
calls, stream establishment and idle reads, IAM token requests).

Key Components
--------------
TimeoutConfig
    Frozen dataclass capturing normalized timeout values in seconds.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use and again whenever the overrides change. Supported environment
    variables (all optional):
        WATSONX_TIMEOUT_CONNECT_SECONDS
        WATSONX_TIMEOUT_HTTP_SECONDS
        WATSONX_TIMEOUT_STREAM_SECONDS
        WATSONX_TIMEOUT_AUTH_SECONDS

Failure Modes
-------------
Unparseable or non-positive overrides are ignored and the default is kept.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

_ENV_NAMES = (
    "WATSONX_TIMEOUT_CONNECT_SECONDS",
    "WATSONX_TIMEOUT_HTTP_SECONDS",
    "WATSONX_TIMEOUT_STREAM_SECONDS",
    "WATSONX_TIMEOUT_AUTH_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Time allowed to open a connection.
        http_timeout_seconds: Read timeout for non-streaming chat calls.
        stream_timeout_seconds: Idle timeout while waiting for the next SSE
            chunk of an established stream.
        auth_timeout_seconds: Timeout for identity token requests.
    """

    connect_timeout_seconds: float = 10.0
    http_timeout_seconds: float = 60.0
    stream_timeout_seconds: float = 120.0
    auth_timeout_seconds: float = 10.0

    def for_purpose(self, purpose: str) -> httpx.Timeout:
        """Return an ``httpx.Timeout`` for a client pool purpose.

        ``"stream"`` uses the idle stream timeout for reads, ``"auth"`` the
        token timeout, anything else the plain HTTP timeout.
        """
        if purpose == "stream":
            read = self.stream_timeout_seconds
        elif purpose == "auth":
            read = self.auth_timeout_seconds
        else:
            read = self.http_timeout_seconds
        return httpx.Timeout(read, connect=self.connect_timeout_seconds)


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Parse an environment variable as a positive float with a fallback."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached `TimeoutConfig` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(name, "") for name in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.connect_timeout_seconds),
        http_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.http_timeout_seconds),
        stream_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.stream_timeout_seconds),
        auth_timeout_seconds=_parse_env_float(_ENV_NAMES[3], defaults.auth_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
