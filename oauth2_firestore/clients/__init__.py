"""Expose the Firestore collection wrapper."""

from .firestore import (
    DEFAULT_TIMEOUT_SECONDS,
    DeadlineExceededError,
    FirestoreCollectionClient,
    TokenNotFoundError,
)

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "DeadlineExceededError",
    "FirestoreCollectionClient",
    "TokenNotFoundError",
]
