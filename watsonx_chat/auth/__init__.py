"""Authentication: bearer token providers and the shared token cache."""

from .authenticator import Authenticator, StaticTokenAuthenticator
from .iam_authenticator import IAMAuthenticator, IdentityTokenResponse
from .token_cache import CachedToken, TokenCache

__all__ = [
    "Authenticator",
    "StaticTokenAuthenticator",
    "IAMAuthenticator",
    "IdentityTokenResponse",
    "CachedToken",
    "TokenCache",
]
