"""Authentication failure raised by authenticators."""
from __future__ import annotations

from dataclasses import dataclass

from .error_code import ErrorCode
from .watsonx_error import WatsonxError


@dataclass(eq=False)
class AuthenticationError(WatsonxError):
    """Failure to obtain or use a bearer token.

    ``expired`` marks failures that a token refresh can fix; the retry layer
    treats those exactly like an upstream token-expired response.
    """

    expired: bool = False

    @property
    def code(self) -> ErrorCode:
        return ErrorCode.TOKEN_EXPIRED if self.expired else ErrorCode.AUTH

    def is_token_expired(self) -> bool:
        return self.expired or super().is_token_expired()


__all__ = ["AuthenticationError"]
