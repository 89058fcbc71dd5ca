"""Shared worker pools.

Purpose:
    ``io`` threads read HTTP streams, ``callback`` threads run handler
    callbacks. Keeping them apart means a slow handler never stalls a
    network read, and a blocked read never delays callbacks of other
    streams.

Lifecycle & cleanup:
    Pools are created lazily and shut down at interpreter exit via
    ``atexit``; :func:`shutdown_executors` does the same on demand.
"""

from __future__ import annotations

import atexit
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict

_POOLS: Dict[str, ThreadPoolExecutor] = {}
_LOCK = threading.Lock()

_DEFAULT_WORKERS = min(32, (os.cpu_count() or 1) + 4)


def _get(name: str) -> ThreadPoolExecutor:
    pool = _POOLS.get(name)
    if pool is not None:
        return pool
    with _LOCK:
        pool = _POOLS.get(name)
        if pool is None:
            pool = ThreadPoolExecutor(max_workers=_DEFAULT_WORKERS, thread_name_prefix=f"watsonx-{name}")
            _POOLS[name] = pool
        return pool


def io_executor() -> ThreadPoolExecutor:
    return _get("io")


def callback_executor() -> ThreadPoolExecutor:
    return _get("callback")


def shutdown_executors(wait: bool = True) -> None:
    with _LOCK:
        pools = list(_POOLS.values())
        _POOLS.clear()
    for pool in pools:
        pool.shutdown(wait=wait)


atexit.register(shutdown_executors, False)


__all__ = ["io_executor", "callback_executor", "shutdown_executors"]
