"""Retry and re-authentication policy for chat requests.

Two independent budgets apply to every attempt of a request:

- token expired: the service answered 401 ``authentication_token_expired`` or
  403 ``cos_access_denied``, or the authenticator itself reported an expired
  token. The ``on_token_expired`` hook runs (it invalidates the cached token)
  and the request is rebuilt and resent.
- retryable status: 429, 503, 504 and 520 are resent as they are.

Retries are immediate. Every attempt calls the wrapped function again from
scratch, so request construction (including the bearer header) is redone.
Any other ``WatsonxError`` and every non-``WatsonxError`` exception
propagates unchanged on first occurrence.
"""
from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, TypeVar

from ...config import defaults
from ...config.env import env_int
from ..errors import WatsonxError

T = TypeVar("T")

REASON_TOKEN_EXPIRED = "token_expired"
REASON_STATUS = "retryable_status"


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        reason: Optional[str],
        error: WatsonxError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    token_expired_max_retries: int = defaults.TOKEN_EXPIRED_MAX_RETRIES
    status_codes_max_retries: int = defaults.STATUS_CODES_MAX_RETRIES
    retryable_status_codes: tuple[int, ...] = defaults.RETRYABLE_STATUS_CODES
    attempt_logger: AttemptLogger | None = None

    @classmethod
    def from_env(cls, attempt_logger: AttemptLogger | None = None) -> "RetryConfig":
        """Build a config honoring the ``WATSONX_RETRY_*`` overrides."""
        return cls(
            token_expired_max_retries=env_int(
                defaults.ENV_RETRY_TOKEN_EXPIRED_MAX_RETRIES, defaults.TOKEN_EXPIRED_MAX_RETRIES
            ),
            status_codes_max_retries=env_int(
                defaults.ENV_RETRY_STATUS_CODES_MAX_RETRIES, defaults.STATUS_CODES_MAX_RETRIES
            ),
            attempt_logger=attempt_logger,
        )

    def retry_reason(self, error: WatsonxError) -> Optional[str]:
        """Return which budget ``error`` draws from, or ``None`` if it is final."""
        if error.is_token_expired():
            return REASON_TOKEN_EXPIRED
        if error.status_code is not None and error.status_code in self.retryable_status_codes:
            return REASON_STATUS
        return None


DEFAULT_RETRY_CONFIG = RetryConfig()


def call_with_retry(
    func: Callable[[], T],
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    on_token_expired: Callable[[WatsonxError], None] | None = None,
) -> T:
    """Invoke ``func`` applying the retry policy and return its result."""
    budgets = {
        REASON_TOKEN_EXPIRED: config.token_expired_max_retries,
        REASON_STATUS: config.status_codes_max_retries,
    }
    used = {REASON_TOKEN_EXPIRED: 0, REASON_STATUS: 0}
    attempt = 0
    while True:
        try:
            result = func()
        except WatsonxError as e:
            reason = config.retry_reason(e)
            exhausted = reason is None or used[reason] >= budgets[reason]
            if config.attempt_logger:
                config.attempt_logger(attempt=attempt, reason=None if exhausted else reason, error=e)
            if exhausted:
                raise
            used[reason] += 1
            attempt += 1
            if reason == REASON_TOKEN_EXPIRED and on_token_expired is not None:
                on_token_expired(e)
            continue
        if config.attempt_logger:
            config.attempt_logger(attempt=attempt, reason=None, error=None)
        return result


def retry(
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    on_token_expired: Callable[[WatsonxError], None] | None = None,
):
    """Return a decorator applying :func:`call_with_retry` to a function."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return call_with_retry(lambda: func(*args, **kwargs), config, on_token_expired)

        return wrapper

    return decorator


__all__ = [
    "AttemptLogger",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "call_with_retry",
    "retry",
]
