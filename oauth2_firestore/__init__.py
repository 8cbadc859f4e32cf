"""Firestore-backed storage for OAuth2 authorization codes and tokens."""

from .clients import DeadlineExceededError, FirestoreCollectionClient, TokenNotFoundError
from .models.token import TokenInfo
from .services import InvalidTokenInfoError, TokenStore, new, new_with_timeout

__all__ = [
    "DeadlineExceededError",
    "FirestoreCollectionClient",
    "InvalidTokenInfoError",
    "TokenInfo",
    "TokenNotFoundError",
    "TokenStore",
    "new",
    "new_with_timeout",
]
