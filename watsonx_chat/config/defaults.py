"""watsonx_chat.config.defaults
============================

Central place for small, stable default values used across the client.
These defaults can be overridden via environment variables, a config file
or explicit arguments, but provide sensible fallbacks.

This module intentionally imports nothing from the rest of the package so
any layer can depend on it without creating cycles. Only plain constants
live here.
"""

from __future__ import annotations

# ---- Service endpoints ----
# Regional base URL used when neither the environment nor the caller sets one.
DEFAULT_BASE_URL = "https://us-south.ml.cloud.ibm.com"
# Date-based API version sent as the ``version`` query parameter.
DEFAULT_API_VERSION = "2025-04-23"
CHAT_PATH = "/ml/v1/text/chat"
CHAT_STREAM_PATH = "/ml/v1/text/chat_stream"

# ---- Headers ----
TRANSACTION_ID_HEADER = "X-Global-Transaction-Id"
REQUEST_ID_HEADER = "Watsonx-AI-SDK-Request-Id"
SSE_CONTENT_TYPE = "text/event-stream"
JSON_CONTENT_TYPE = "application/json"

# ---- Identity (IAM) ----
IAM_DEFAULT_URL = "https://iam.cloud.ibm.com/identity/token"
IAM_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"
# Seconds subtracted from the token expiration so a token is not used at the
# exact moment it lapses.
IAM_EXPIRY_LEEWAY_SECONDS = 60

# ---- Retry ----
TOKEN_EXPIRED_MAX_RETRIES = 1
STATUS_CODES_MAX_RETRIES = 10
RETRYABLE_STATUS_CODES = (429, 503, 504, 520)

# ---- Environment variable names ----
ENV_URL = "WATSONX_URL"
ENV_API_KEY = "WATSONX_API_KEY"  # pragma: allowlist secret - env var name, not a secret
ENV_PROJECT_ID = "WATSONX_PROJECT_ID"
ENV_SPACE_ID = "WATSONX_SPACE_ID"
ENV_MODEL_ID = "WATSONX_MODEL_ID"
ENV_API_VERSION = "WATSONX_API_VERSION"
ENV_CONFIG_FILE = "WATSONX_CONFIG_FILE"
ENV_RETRY_TOKEN_EXPIRED_MAX_RETRIES = "WATSONX_RETRY_TOKEN_EXPIRED_MAX_RETRIES"
ENV_RETRY_STATUS_CODES_MAX_RETRIES = "WATSONX_RETRY_STATUS_CODES_MAX_RETRIES"
ENV_LOG_REQUESTS = "WATSONX_LOG_REQUESTS"
ENV_LOG_RESPONSES = "WATSONX_LOG_RESPONSES"
