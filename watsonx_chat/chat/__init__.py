"""Chat completions: models, streaming pipeline and the service facade."""

from .handler import ChatHandler
from .interceptors import InterceptorContext, InterceptorPipeline, MessageInterceptor, ToolInterceptor
from .service import ChatService
from .session import StreamingCall

__all__ = [
    "ChatHandler",
    "ChatService",
    "InterceptorContext",
    "InterceptorPipeline",
    "MessageInterceptor",
    "StreamingCall",
    "ToolInterceptor",
]
