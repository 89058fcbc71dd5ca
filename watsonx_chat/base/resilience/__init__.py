"""Resilience helpers (retry policy)."""

from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, call_with_retry, retry

__all__ = ["DEFAULT_RETRY_CONFIG", "RetryConfig", "call_with_retry", "retry"]
