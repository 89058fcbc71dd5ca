"""Cooperative cancellation for streaming calls.

A :class:`CancellationToken` is shared between the caller-facing handle of a
stream and the I/O loop reading it. Cancelling runs the registered close
callbacks (closing the HTTP response unblocks a pending read) and the read
loop stops at its next check. Nothing is flushed on cancellation.
"""

from __future__ import annotations

import concurrent.futures
import contextlib
from threading import Lock
from typing import Callable, List


class CancelledError(concurrent.futures.CancelledError):
    """Raised (or set on a future) when a stream was cancelled by its caller."""


class CancellationToken:
    """Thread-safe one-shot cancellation flag with close callbacks."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._cancelled = False
        self._reason: str | None = None
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._reason

    def cancel(self, reason: str | None = None) -> bool:
        """Request cancellation; returns False if it was already requested."""
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            self._reason = reason
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for cb in callbacks:
            # closing an already-broken connection may raise; the stream is gone either way
            with contextlib.suppress(Exception):
                cb()
        return True

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register ``callback``; runs immediately if already cancelled."""
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return
        with contextlib.suppress(Exception):
            callback()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise CancelledError(self._reason or "stream cancelled")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._cancelled}, reason={self._reason!r})"


__all__ = ["CancellationToken", "CancelledError"]
