"""watsonx_chat package

Client for the watsonx.ai text chat API with a streaming engine.

Public API (re-exported):
    - Version: ``__version__``
    - Service: :class:`ChatService`, :class:`ChatHandler`, :class:`StreamingCall`
    - Interceptors: :class:`InterceptorContext`
    - Auth: :class:`IAMAuthenticator`, :class:`StaticTokenAuthenticator`
    - Exceptions: :class:`WatsonxError` and subclasses, :class:`ErrorCode`
    - Request/response models from :mod:`watsonx_chat.chat.models`
    - Config: :func:`get_client_config`, :class:`RetryConfig`
"""

from .auth import Authenticator, IAMAuthenticator, StaticTokenAuthenticator
from .base.cancellation import CancelledError
from .base.errors import (
    AuthenticationError,
    ErrorCode,
    ErrorDetails,
    EventDecodeError,
    StreamEventError,
    TransportError,
    WatsonxError,
)
from .base.resilience import RetryConfig
from .chat import ChatHandler, ChatService, InterceptorContext, StreamingCall
from .chat.models import (
    AssistantMessage,
    ChatParameters,
    ChatRequest,
    ChatResponse,
    CompletedToolCall,
    ControlMessage,
    ExtractionTags,
    FinishReason,
    FunctionCall,
    PartialChatResponse,
    PartialToolCall,
    SystemMessage,
    Thinking,
    ThinkingEffort,
    Tool,
    ToolCall,
    ToolChoiceOption,
    ToolMessage,
    UserMessage,
)
from .config import ClientConfig, get_client_config

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Authenticator",
    "IAMAuthenticator",
    "StaticTokenAuthenticator",
    "CancelledError",
    "AuthenticationError",
    "ErrorCode",
    "ErrorDetails",
    "EventDecodeError",
    "StreamEventError",
    "TransportError",
    "WatsonxError",
    "RetryConfig",
    "ChatHandler",
    "ChatService",
    "InterceptorContext",
    "StreamingCall",
    "AssistantMessage",
    "ChatParameters",
    "ChatRequest",
    "ChatResponse",
    "CompletedToolCall",
    "ControlMessage",
    "ExtractionTags",
    "FinishReason",
    "FunctionCall",
    "PartialChatResponse",
    "PartialToolCall",
    "SystemMessage",
    "Thinking",
    "ThinkingEffort",
    "Tool",
    "ToolCall",
    "ToolChoiceOption",
    "ToolMessage",
    "UserMessage",
    "ClientConfig",
    "get_client_config",
]
