"""HTTP transport for the chat endpoints.

Purpose:
    Build and send ``POST /ml/v1/text/chat`` (JSON) and
    ``POST /ml/v1/text/chat_stream`` (SSE) requests, turning non-2xx answers
    into :class:`WatsonxError` with the decoded error body and ``httpx``
    failures into :class:`TransportError`.

External dependencies:
    - ``httpx``: pooled clients from :func:`get_httpx_client`, or a caller
      supplied ``httpx.Client`` (tests pass one backed by ``MockTransport``).

Logging:
    ``chat.request`` / ``chat.response`` bodies are logged only when
    ``log_requests`` / ``log_responses`` are enabled.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterator, Optional

import httpx
from pydantic import ValidationError

from ..base.errors import ErrorDetails, TransportError, WatsonxError
from ..base.http import get_httpx_client
from ..base.logging import LogContext, get_logger, log_event
from ..base.timeouts import get_timeout_config
from ..config import defaults

logger = get_logger(__name__)

PURPOSE_CHAT = "chat"
PURPOSE_STREAM = "stream"


def error_from_response(response: httpx.Response) -> WatsonxError:
    """Decode a non-2xx response into a :class:`WatsonxError`."""
    text = response.text
    details: Optional[ErrorDetails] = None
    try:
        details = ErrorDetails.model_validate_json(text) if text else None
    except ValidationError:
        details = None
    message = (details.first_message() if details else None) or text or response.reason_phrase
    return WatsonxError(message=message, status_code=response.status_code, details=details)


class ChatTransport:
    """Sends chat requests for one service endpoint."""

    def __init__(
        self,
        base_url: str = defaults.DEFAULT_BASE_URL,
        api_version: str = defaults.DEFAULT_API_VERSION,
        http_client: Optional[httpx.Client] = None,
        log_requests: bool = False,
        log_responses: bool = False,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self._client = http_client
        self.log_requests = log_requests
        self.log_responses = log_responses

    def _http(self, purpose: str) -> httpx.Client:
        return self._client or get_httpx_client(self.base_url, purpose)

    def _headers(self, token: str, accept: str, transaction_id: Optional[str], request_id: str) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": accept,
            "Content-Type": defaults.JSON_CONTENT_TYPE,
            defaults.REQUEST_ID_HEADER: request_id,
        }
        if transaction_id:
            headers[defaults.TRANSACTION_ID_HEADER] = transaction_id
        return headers

    def _build(
        self, path: str, purpose: str, payload: Dict[str, Any], token: str, accept: str,
        transaction_id: Optional[str], ctx: Optional[LogContext],
    ) -> httpx.Request:
        request_id = uuid.uuid4().hex
        if ctx is not None:
            ctx.request_id = request_id
        if self.log_requests:
            log_event(logger, "chat.request", ctx, path=path, body=payload)
        return self._http(purpose).build_request(
            "POST",
            f"{self.base_url}{path}",
            params={"version": self.api_version},
            json=payload,
            headers=self._headers(token, accept, transaction_id, request_id),
            timeout=get_timeout_config().for_purpose(purpose),
        )

    def post_chat(
        self,
        payload: Dict[str, Any],
        token: str,
        transaction_id: Optional[str] = None,
        ctx: Optional[LogContext] = None,
    ) -> Dict[str, Any]:
        """Send a blocking chat request and return the decoded JSON body."""
        request = self._build(
            defaults.CHAT_PATH, PURPOSE_CHAT, payload, token, defaults.JSON_CONTENT_TYPE, transaction_id, ctx
        )
        try:
            response = self._http(PURPOSE_CHAT).send(request)
        except httpx.HTTPError as e:
            raise TransportError(message=f"chat request failed: {e}", raw=e) from e
        if not response.is_success:
            raise error_from_response(response)
        if self.log_responses:
            log_event(logger, "chat.response", ctx, status=response.status_code, body=response.text)
        return response.json()

    def open_stream(
        self,
        payload: Dict[str, Any],
        token: str,
        transaction_id: Optional[str] = None,
        ctx: Optional[LogContext] = None,
    ) -> httpx.Response:
        """Send a streaming chat request and return the open response.

        The caller owns the returned response and must close it. Non-2xx
        answers are read, closed and raised here.
        """
        request = self._build(
            defaults.CHAT_STREAM_PATH, PURPOSE_STREAM, payload, token, defaults.SSE_CONTENT_TYPE,
            transaction_id, ctx,
        )
        client = self._http(PURPOSE_STREAM)
        try:
            response = client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise TransportError(message=f"stream request failed: {e}", raw=e) from e
        if not response.is_success:
            try:
                response.read()
            finally:
                response.close()
            raise error_from_response(response)
        return response


def iter_response_bytes(response: httpx.Response) -> Iterator[bytes]:
    """Yield raw body chunks, mapping read failures to :class:`TransportError`."""
    try:
        yield from response.iter_bytes()
    except httpx.StreamClosed:
        return
    except httpx.HTTPError as e:
        raise TransportError(message=f"stream read failed: {e}", raw=e) from e


__all__ = ["ChatTransport", "error_from_response", "iter_response_bytes", "PURPOSE_CHAT", "PURPOSE_STREAM"]
