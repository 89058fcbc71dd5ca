"""IBM Cloud IAM authenticator.

Exchanges an API key for a bearer token at the IAM identity endpoint
(``POST`` form ``grant_type=urn:ibm:params:oauth:grant-type:apikey&apikey=``)
and caches it in a :class:`TokenCache` until shortly before the
``expiration`` epoch second reported by IAM.

Failure modes:
    - Non-2xx IAM answers raise :class:`AuthenticationError` carrying the
      status and response text.
    - ``httpx`` I/O failures raise :class:`AuthenticationError` with the
      original exception in ``raw``.
"""
from __future__ import annotations

from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from ..base.errors import AuthenticationError
from ..base.http import get_httpx_client
from ..config import defaults
from .authenticator import Authenticator
from .token_cache import CachedToken, TokenCache


class IdentityTokenResponse(BaseModel):
    """Relevant part of the IAM token response."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    expiration: Optional[int] = None


class IAMAuthenticator(Authenticator):
    """API-key authenticator backed by IBM Cloud IAM."""

    def __init__(
        self,
        api_key: str,
        *,
        url: str = defaults.IAM_DEFAULT_URL,
        grant_type: str = defaults.IAM_GRANT_TYPE,
        http_client: Optional[httpx.Client] = None,
        leeway_seconds: float = defaults.IAM_EXPIRY_LEEWAY_SECONDS,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must be non-empty")
        self._api_key = api_key
        self._url = url
        self._grant_type = grant_type
        self._client = http_client
        self._cache = TokenCache(self._request_token, leeway_seconds=leeway_seconds)

    def token(self) -> str:
        return self._cache.get()

    def invalidate(self, stale: Optional[str] = None) -> None:
        self._cache.invalidate(stale)

    def _request_token(self) -> CachedToken:
        client = self._client or get_httpx_client(None, "auth")
        try:
            response = client.post(
                self._url,
                data={"grant_type": self._grant_type, "apikey": self._api_key},
                headers={"Accept": defaults.JSON_CONTENT_TYPE},
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(message=f"IAM request failed: {e}", raw=e) from e
        if not response.is_success:
            raise AuthenticationError(message=response.text, status_code=response.status_code)
        try:
            body = IdentityTokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise AuthenticationError(message="IAM returned an unreadable token", raw=e) from e
        expires_at = float(body.expiration) if body.expiration is not None else None
        return CachedToken(value=body.access_token, expires_at=expires_at)


__all__ = ["IAMAuthenticator", "IdentityTokenResponse"]
