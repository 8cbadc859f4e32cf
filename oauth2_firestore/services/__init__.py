"""Service layer exports."""

from .token_store import InvalidTokenInfoError, TokenStore, new, new_with_timeout

__all__ = [
    "InvalidTokenInfoError",
    "TokenStore",
    "new",
    "new_with_timeout",
]
