"""Lock-free-read bearer token cache.

The cache holds a single immutable :class:`CachedToken`. Readers only read
the reference. A refresh fetches a new token outside any lock and then
publishes it with a compare-and-swap: the new value is installed only if the
cached reference is still the one the refresher observed. When another
thread won the race with a still-valid token, that token is returned and the
freshly fetched one is discarded.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..base.logging import get_logger, log_event

_logger = get_logger(__name__)


@dataclass(frozen=True)
class CachedToken:
    """Bearer token plus its absolute expiry (epoch seconds, None = never)."""

    value: str
    expires_at: Optional[float] = None

    def is_valid(self, now: float, leeway: float = 0.0) -> bool:
        return self.expires_at is None or now < self.expires_at - leeway


class TokenCache:
    """Single-slot token cache refreshed via compare-and-swap."""

    def __init__(
        self,
        fetch: Callable[[], CachedToken],
        *,
        leeway_seconds: float = 0.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetch = fetch
        self._leeway = leeway_seconds
        self._clock = clock
        self._current: Optional[CachedToken] = None
        # guards only the swap itself, never the fetch
        self._swap_lock = threading.Lock()

    @property
    def current(self) -> Optional[CachedToken]:
        return self._current

    def get(self) -> str:
        """Return a valid token, fetching one when the cache is empty or stale."""
        observed = self._current
        if observed is not None and observed.is_valid(self._clock(), self._leeway):
            return observed.value
        fresh = self._fetch()
        return self._compare_and_set(observed, fresh).value

    def invalidate(self, stale: Optional[str] = None) -> bool:
        """Drop the cached token.

        When ``stale`` is given the token is dropped only if it is still the
        cached one, so a refresh published concurrently is kept.
        """
        with self._swap_lock:
            current = self._current
            if current is None:
                return False
            if stale is not None and current.value != stale:
                return False
            self._current = None
        log_event(_logger, "auth.invalidate")
        return True

    def _compare_and_set(self, expected: Optional[CachedToken], fresh: CachedToken) -> CachedToken:
        with self._swap_lock:
            current = self._current
            if current is not expected and current is not None and current.is_valid(self._clock(), self._leeway):
                return current
            self._current = fresh
        log_event(_logger, "auth.refresh", expires_at=fresh.expires_at)
        return fresh


__all__ = ["CachedToken", "TokenCache"]
