"""Expose wiring helpers for applications embedding the token store."""

from .clients import (
    build_firestore_client,
    get_firestore_client,
    get_token_store,
    setup_logging,
)

__all__ = [
    "build_firestore_client",
    "get_firestore_client",
    "get_token_store",
    "setup_logging",
]
