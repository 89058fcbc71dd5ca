"""Error types, upstream error bodies and exception classification."""
from __future__ import annotations

import concurrent.futures

import httpx
import pytest

from watsonx_chat.base.errors import (
    AuthenticationError,
    ErrorCode,
    ErrorDetails,
    EventDecodeError,
    StreamEventError,
    TransportError,
    WatsonxError,
    classify_exception,
    code_for_status,
)
from watsonx_chat.chat.transport import error_from_response

from .helpers import error_body


def test_error_body_is_decoded_from_response():
    response = httpx.Response(404, json=error_body(404, "model_not_supported", "Model 'x' is not supported"))
    error = error_from_response(response)
    assert error.status_code == 404 and error.code is ErrorCode.NOT_FOUND  # nosec B101
    assert error.message == "Model 'x' is not supported"  # nosec B101
    assert error.details.trace == "0123456789abcdef"  # nosec B101
    assert error.details.has_code("model_not_supported")  # nosec B101


def test_non_json_body_becomes_the_message():
    error = error_from_response(httpx.Response(502, text="<html>bad gateway</html>"))
    assert error.message == "<html>bad gateway</html>" and error.details is None  # nosec B101
    assert error.code is ErrorCode.TRANSIENT  # nosec B101


def test_empty_body_falls_back_to_reason_phrase():
    assert error_from_response(httpx.Response(503)).message == "Service Unavailable"  # nosec B101


@pytest.mark.parametrize("status,code,expired", [
    (401, "authentication_token_expired", True),
    (403, "cos_access_denied", True),
    (401, "authorization_rejected", False),
    (403, "authentication_token_expired", False),
])
def test_token_expiry_shapes(status, code, expired):
    details = ErrorDetails.model_validate(error_body(status, code, "m"))
    error = WatsonxError(message="m", status_code=status, details=details)
    assert error.is_token_expired() is expired  # nosec B101
    assert (error.code is ErrorCode.TOKEN_EXPIRED) is expired  # nosec B101


def test_subclass_codes():
    assert TransportError(message="x").code is ErrorCode.TRANSPORT  # nosec B101
    assert StreamEventError(message="x").code is ErrorCode.STREAM  # nosec B101
    assert EventDecodeError(message="x", data="{").code is ErrorCode.VALIDATION  # nosec B101
    assert AuthenticationError(message="x").code is ErrorCode.AUTH  # nosec B101
    assert AuthenticationError(message="x", expired=True).is_token_expired()  # nosec B101


def test_errors_are_exceptions_with_readable_text():
    error = WatsonxError(message="quota exceeded", status_code=429)
    with pytest.raises(WatsonxError, match="quota exceeded"):
        raise error
    assert str(error) == "[429] rate_limit: quota exceeded"  # nosec B101


@pytest.mark.parametrize("status,expected", [
    (None, ErrorCode.UNKNOWN),
    (418, ErrorCode.UNKNOWN),
    (422, ErrorCode.VALIDATION),
    (520, ErrorCode.TRANSIENT),
    (599, ErrorCode.SERVER_ERROR),
])
def test_code_for_status(status, expected):
    assert code_for_status(status) is expected  # nosec B101


def test_classify_exception():
    request = httpx.Request("GET", "https://example.test")
    assert classify_exception(TransportError(message="x")) is ErrorCode.TRANSPORT  # nosec B101
    assert classify_exception(concurrent.futures.CancelledError()) is ErrorCode.CANCELLED  # nosec B101
    assert classify_exception(httpx.ReadTimeout("slow", request=request)) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ConnectError("down", request=request)) is ErrorCode.TRANSPORT  # nosec B101
    response = httpx.Response(409, request=request)
    status_error = httpx.HTTPStatusError("conflict", request=request, response=response)
    assert classify_exception(status_error) is ErrorCode.CONFLICT  # nosec B101
    assert classify_exception(RuntimeError("?")) is ErrorCode.UNKNOWN  # nosec B101
