"""
Streaming chat session.

One :class:`StreamingChatSession` drives one ``chat_streaming`` call:

1. an I/O worker establishes the stream under the retry policy, then runs
   bytes through :class:`SseFrameReader`, :class:`EventEnvelopeDecoder` and
   :class:`DeltaAccumulator`;
2. every handler callback the accumulator produces is queued on the
   session's :class:`CallbackDispatcher` and runs later, in order, on a
   callback worker;
3. the final task applies the interceptors, calls ``on_complete_response``
   and resolves the :class:`StreamingCall` future.

Cancellation closes the HTTP response and stops reading. Accumulated state
is left as it was (no final response is built). Once the callbacks already
queued have run, the future fails with :class:`CancelledError`, or is
cancelled outright when the caller used ``Future.cancel``.
"""

from __future__ import annotations

import contextlib
import threading
from concurrent.futures import Future, InvalidStateError
from typing import Callable, Dict, Optional, Tuple

import httpx

from ..auth import Authenticator
from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import WatsonxError, classify_exception
from ..base.logging import LogContext, get_logger, log_event, normalized_log_event
from ..base.resilience import RetryConfig, call_with_retry
from .accumulator import DeltaAccumulator, slot_key
from .decoder import EventEnvelopeDecoder, EventKind
from .dispatch import CallbackDispatcher
from .executors import io_executor
from .handler import ChatHandler
from .interceptors import InterceptorPipeline, substitute_tool_calls
from .models import (
    ChatRequest,
    ChatResponse,
    CompletedToolCall,
    PartialChatResponse,
    PartialToolCall,
    ToolCall,
)
from .request_builder import tool_has_parameters
from .sse import SseFrame, iter_frames
from .transport import ChatTransport, iter_response_bytes

logger = get_logger(__name__)


class StreamingCall(Future):
    """Future of a streaming chat call, resolving to the final ``ChatResponse``.

    Neither :meth:`cancel_stream` nor :meth:`cancel` marks the future done
    on the spot: callbacks already queued still run, then the session
    settles the future. After :meth:`cancel` returns True the future always
    ends cancelled. After :meth:`cancel_stream` it fails with
    :class:`CancelledError`, unless the final response was queued first.
    """

    def __init__(self, token: Optional[CancellationToken] = None) -> None:
        super().__init__()
        self._token = token or CancellationToken()
        # reentrant: done callbacks run while it is held and may call cancel()
        self._settle_lock = threading.RLock()
        self._cancel_requested = False

    @property
    def cancellation_token(self) -> CancellationToken:
        return self._token

    def cancel_stream(self, reason: Optional[str] = None) -> bool:
        """Close the stream; returns False if it was already cancelled."""
        return self._token.cancel(reason or "cancelled by caller")

    def cancel(self) -> bool:
        """Request cancellation; returns False if the call already finished."""
        with self._settle_lock:
            if self.done():
                return self.cancelled()
            self._cancel_requested = True
        self.cancel_stream("future cancelled")
        return True

    def _resolve(self, value: object) -> None:
        with self._settle_lock:
            if self._cancel_requested:
                return
            with contextlib.suppress(InvalidStateError):
                self.set_result(value)

    def _reject(self, error: BaseException) -> None:
        with self._settle_lock:
            if self._cancel_requested:
                return
            with contextlib.suppress(InvalidStateError):
                self.set_exception(error)

    def _settle_cancelled(self, error: CancelledError) -> None:
        with self._settle_lock:
            if self._cancel_requested:
                super().cancel()
                return
            with contextlib.suppress(InvalidStateError):
                self.set_exception(error)


class StreamingChatSession:
    """State of one streaming call; not reusable."""

    def __init__(
        self,
        request: ChatRequest,
        payload: Dict[str, object],
        transport: ChatTransport,
        authenticator: Authenticator,
        handler: ChatHandler,
        retry_config: RetryConfig,
        pipeline: InterceptorPipeline,
        invoker: Callable[[ChatRequest], ChatResponse],
        ctx: Optional[LogContext] = None,
        dispatcher: Optional[CallbackDispatcher] = None,
    ) -> None:
        self._request = request
        self._payload = payload
        self._transport = transport
        self._authenticator = authenticator
        self._handler = handler
        self._retry_config = retry_config
        self._pipeline = pipeline
        self._ictx = pipeline.context(request, invoker)
        self._ctx = ctx or LogContext()
        self.future = StreamingCall()
        self._token = self.future.cancellation_token
        self._dispatcher = dispatcher or CallbackDispatcher(on_failure=self._fail)
        self._token.on_cancel(self._on_cancelled)
        self._accumulator = DeltaAccumulator(
            self,
            extraction_tags=request.extraction_tags,
            tool_has_parameters=tool_has_parameters(request.tools),
            tool_choice_option=request.tool_choice_option,
        )
        self._decoder = EventEnvelopeDecoder()
        self._intercepted: Dict[Tuple[int, Optional[int]], ToolCall] = {}
        self._last_token: Optional[str] = None
        self._response: Optional[httpx.Response] = None
        self._halted = threading.Event()

    def start(self) -> StreamingCall:
        io_executor().submit(self._run)
        return self.future

    # ---- I/O side -----------------------------------------------------

    def _establish(self) -> httpx.Response:
        self._token.raise_if_cancelled()
        token = self._authenticator.async_token().result()
        self._last_token = token
        return self._transport.open_stream(
            self._payload, token, self._request.transaction_id, self._ctx
        )

    def _on_token_expired(self, error: WatsonxError) -> None:
        self._authenticator.invalidate(self._last_token)

    def _run(self) -> None:
        try:
            response = call_with_retry(self._establish, self._retry_config, self._on_token_expired)
        except CancelledError:
            # settlement was queued by _on_cancelled
            return
        except Exception as e:  # noqa: BLE001 - delivered to the handler and the future
            log_event(logger, "stream.failed", self._ctx, error=str(e), error_code=classify_exception(e).value)
            self._submit(lambda error=e: self._terminal_failure(error))
            return

        self._response = response
        self._token.on_cancel(response.close)
        normalized_log_event(logger, "stream.start", self._ctx, phase="start", attempt=None, emitted=False, tokens=None)
        try:
            self._consume(response)
        finally:
            response.close()

    def _consume(self, response: httpx.Response) -> None:
        try:
            for frame in iter_frames(iter_response_bytes(response)):
                if self._stopped() or self._handle_frame(frame):
                    break
        except Exception as e:  # noqa: BLE001 - a read failing after close is expected on cancel
            if not self._stopped():
                log_event(logger, "stream.failed", self._ctx, error=str(e), error_code=classify_exception(e).value)
                self._submit(lambda error=e: self._terminal_failure(error))
                return
        self._after_loop()

    def _stopped(self) -> bool:
        return self._token.cancelled or self._halted.is_set()

    def _handle_frame(self, frame: SseFrame) -> bool:
        """Process one frame; returns True when the stream is over."""
        if self._transport.log_responses:
            log_event(logger, "stream.event", self._ctx, sse_event=frame.event, data=frame.data)
        event = self._decoder.decode(frame)
        if event.kind is EventKind.CHUNK:
            if self._ctx.completion_id is None and event.chunk.id:
                self._ctx = self._ctx.with_completion(event.chunk.id)
            return self._accumulator.accept(event.chunk)
        if event.kind is EventKind.DECODE_ERROR:
            log_event(logger, "stream.decode_error", self._ctx, error=event.error.message)
            self._stream_error(event.error)
            return False
        if event.kind is EventKind.ERROR:
            log_event(logger, "stream.error", self._ctx, error=event.error.message)
            self._stream_error(event.error)
            return False
        return event.kind is EventKind.CLOSE

    def _after_loop(self) -> None:
        if self._halted.is_set() or self._token.cancelled:
            return
        self._accumulator.finish()

    def _stream_error(self, error: WatsonxError) -> None:
        if not self._handler.fail_on_first_error:
            self._submit(lambda: self._deliver_error(error))
            return
        self._halt()
        self._submit(lambda: self._terminal_failure(error))

    def _halt(self) -> None:
        self._halted.set()
        if self._response is not None:
            self._response.close()

    def _on_cancelled(self) -> None:
        """Queue the cancellation behind the callbacks already waiting."""
        if self.future.done():
            return
        log_event(logger, "stream.cancelled", self._ctx, reason=self._token.reason)
        error = CancelledError(self._token.reason or "stream cancelled")
        self._submit(lambda: self.future._settle_cancelled(error))

    # ---- callback side ------------------------------------------------

    def _submit(self, task: Callable[[], None]) -> None:
        self._dispatcher.submit(task)

    def _fail(self, error: BaseException) -> None:
        self._halt()
        self.future._reject(error)

    def _deliver_error(self, error: BaseException) -> None:
        try:
            self._handler.on_error(error)
        except Exception as fatal:  # noqa: BLE001 - on_error failures end the call
            self._fail(fatal)

    def _terminal_failure(self, error: BaseException) -> None:
        self._deliver_error(error)
        self._fail(error)

    def _guarded(self, callback: Callable[[], None]) -> None:
        if self.future.done():
            return
        try:
            callback()
        except Exception as e:  # noqa: BLE001 - handler errors go to on_error
            self._deliver_error(e)

    def on_partial_response(self, text: str, chunk: Optional[PartialChatResponse]) -> None:
        self._submit(lambda: self._guarded(lambda: self._handler.on_partial_response(text, chunk)))

    def on_partial_thinking(self, text: str, chunk: Optional[PartialChatResponse]) -> None:
        self._submit(lambda: self._guarded(lambda: self._handler.on_partial_thinking(text, chunk)))

    def on_partial_tool_call(self, call: PartialToolCall) -> None:
        self._submit(lambda: self._guarded(lambda: self._handler.on_partial_tool_call(call)))

    def on_complete_tool_call(self, call: CompletedToolCall) -> None:
        self._submit(lambda: self._complete_tool_call(call))

    def on_complete_response(self, response: ChatResponse) -> None:
        normalized_log_event(
            logger, "stream.finish", self._ctx, phase="finalize", attempt=None, emitted=True, tokens=response.usage,
        )
        self._submit(lambda: self._complete_response(response))

    def _complete_tool_call(self, call: CompletedToolCall) -> None:
        if self.future.done():
            return
        try:
            tool_call = self._pipeline.apply_tool(self._ictx, call.tool_call)
        except Exception as e:  # noqa: BLE001 - interceptor failures end the call
            self._terminal_failure(e)
            return
        if self._pipeline.tool_interceptor is not None:
            self._intercepted[slot_key(call)] = tool_call
        completed = CompletedToolCall(
            completion_id=call.completion_id, tool_call=tool_call, choice_index=call.choice_index
        )
        self._guarded(lambda: self._handler.on_complete_tool_call(completed))

    def _complete_response(self, response: ChatResponse) -> None:
        if self.future.done():
            return
        try:
            response = substitute_tool_calls(response, self._intercepted)
            response = self._pipeline.apply_message(self._ictx, response)
        except Exception as e:  # noqa: BLE001 - interceptor failures end the call
            self._terminal_failure(e)
            return
        try:
            self._handler.on_complete_response(response)
        except Exception as e:  # noqa: BLE001 - redelivered to on_error, then fails the call
            self._terminal_failure(e)
            return
        self.future._resolve(response)


__all__ = ["StreamingCall", "StreamingChatSession"]
