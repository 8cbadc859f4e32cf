"""
Factory functions that build the shared Firestore client and token store.
"""

import logging
from functools import lru_cache

from google.cloud.firestore import AsyncClient

from oauth2_firestore.core.config import FirestoreSettings, get_settings
from oauth2_firestore.core.logging import configure_logging
from oauth2_firestore.services.token_store import TokenStore, new_with_timeout


def build_firestore_client(settings: FirestoreSettings) -> AsyncClient:
    """Create an async Firestore client for the configured project and database."""
    return AsyncClient(project=settings.project_id, database=settings.database)


def setup_logging(settings: FirestoreSettings | None = None) -> logging.Logger:
    """Apply the configured log level to the token store loggers."""
    settings = settings or get_settings()
    return configure_logging(settings.log_level)


@lru_cache()
def get_firestore_client() -> AsyncClient:
    """Provide a process-wide Firestore client."""
    return build_firestore_client(get_settings())


@lru_cache()
def get_token_store() -> TokenStore:
    """Provide a token store bound to the configured collection."""
    settings = get_settings()
    return new_with_timeout(
        get_firestore_client(),
        settings.collection,
        settings.timeout_seconds,
    )


__all__ = [
    "build_firestore_client",
    "get_firestore_client",
    "get_token_store",
    "setup_logging",
]
