"""Authenticator base class.

An authenticator supplies bearer tokens for the chat transport through a
blocking :meth:`Authenticator.token` and a non-blocking
:meth:`Authenticator.async_token`. Both raise (or resolve with)
:class:`~watsonx_chat.base.errors.AuthenticationError` on failure so auth
problems stay distinguishable from other errors.
"""
from __future__ import annotations

import atexit
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

_EXECUTOR: Optional[ThreadPoolExecutor] = None
_LOCK = threading.Lock()


def _auth_executor() -> ThreadPoolExecutor:
    global _EXECUTOR  # noqa: PLW0603 - lazily created shared pool
    if _EXECUTOR is None:
        with _LOCK:
            if _EXECUTOR is None:
                _EXECUTOR = ThreadPoolExecutor(max_workers=4, thread_name_prefix="watsonx-auth")
                atexit.register(_EXECUTOR.shutdown, wait=False)
    return _EXECUTOR


class Authenticator(ABC):
    """Base authenticator; subclasses implement :meth:`token`."""

    @abstractmethod
    def token(self) -> str:
        """Return a valid bearer token, blocking while one is fetched."""

    def async_token(self) -> "Future[str]":
        """Return a future resolving to a bearer token.

        The default implementation runs :meth:`token` on a shared worker pool.
        """
        return _auth_executor().submit(self.token)

    def invalidate(self, stale: Optional[str] = None) -> None:
        """Forget a token the service rejected as expired.

        The next :meth:`token` call fetches a new one. Authenticators without
        a cache ignore this.
        """


class StaticTokenAuthenticator(Authenticator):
    """Serves a fixed, externally managed bearer token."""

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("token must be non-empty")
        self._token = token

    def token(self) -> str:
        return self._token

    def async_token(self) -> "Future[str]":
        fut: "Future[str]" = Future()
        fut.set_result(self._token)
        return fut


__all__ = ["Authenticator", "StaticTokenAuthenticator"]
