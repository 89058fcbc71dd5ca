"""Pytest configuration for the watsonx_chat test suite.

Provides a log capture attached to the shared ``watsonx`` logger (which does
not propagate to the root logger) and clean pooled clients/timeouts between
tests.
"""
from __future__ import annotations

import json
import logging
from typing import Dict, Iterator, List

import pytest

from watsonx_chat.base.http import close_all_clients
from watsonx_chat.base.logging import BASE_LOGGER_NAME, get_logger


class _ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def events(self) -> List[Dict]:
        out = []
        for record in self.records:
            try:
                payload = json.loads(record.getMessage())
            except ValueError:
                continue
            if isinstance(payload, dict) and "event" in payload:
                out.append(payload)
        return out

    def named(self, name: str) -> List[Dict]:
        return [e for e in self.events() if e["event"] == name]


@pytest.fixture()
def log_capture() -> Iterator[_ListHandler]:
    logger = get_logger(BASE_LOGGER_NAME)
    handler = _ListHandler()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "WATSONX_URL",
        "WATSONX_API_KEY",
        "WATSONX_PROJECT_ID",
        "WATSONX_SPACE_ID",
        "WATSONX_MODEL_ID",
        "WATSONX_API_VERSION",
        "WATSONX_CONFIG_FILE",
        "WATSONX_RETRY_TOKEN_EXPIRED_MAX_RETRIES",
        "WATSONX_RETRY_STATUS_CODES_MAX_RETRIES",
        "WATSONX_LOG_REQUESTS",
        "WATSONX_LOG_RESPONSES",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    close_all_clients()
