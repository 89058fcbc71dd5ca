"""
Per-stream FIFO callback dispatcher.

Each stream owns one :class:`CallbackDispatcher`. Submitted tasks are queued
and drained by at most one worker of the shared callback pool at a time, so
tasks of one stream run strictly in submission order and never
concurrently, while different streams drain in parallel.
"""

from __future__ import annotations

import threading
from collections import deque
from concurrent.futures import Executor
from typing import Callable, Deque, Optional

from ..base.logging import get_logger
from .executors import callback_executor

logger = get_logger(__name__)

Task = Callable[[], None]


class CallbackDispatcher:
    """Single-consumer task queue on a shared executor.

    Args:
        executor: pool running the drain loop; defaults to the shared
            callback pool.
        on_failure: receives an exception escaping a task. Tasks are
            expected to handle their own errors; this is the last resort.
    """

    def __init__(
        self,
        executor: Optional[Executor] = None,
        on_failure: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        self._executor = executor or callback_executor()
        self._on_failure = on_failure
        self._queue: Deque[Task] = deque()
        self._lock = threading.Lock()
        self._draining = False

    def submit(self, task: Task) -> None:
        with self._lock:
            self._queue.append(task)
            if self._draining:
                return
            self._draining = True
        self._executor.submit(self._drain)

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._queue:
                    self._draining = False
                    return
                task = self._queue.popleft()
            try:
                task()
            except Exception as e:  # noqa: BLE001 - reported, the queue keeps draining
                self._report(e)

    def _report(self, error: Exception) -> None:
        if self._on_failure is not None:
            try:
                self._on_failure(error)
                return
            except Exception:  # noqa: BLE001
                logger.exception("dispatch failure handler raised")
        logger.error("callback task failed", exc_info=error)


__all__ = ["CallbackDispatcher"]
