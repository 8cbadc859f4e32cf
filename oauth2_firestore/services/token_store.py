"""
OAuth2 token store backed by a Firestore collection.

Exposes the create / get-by / remove-by contract an authorization server
expects, keyed on the authorization code, the access token or the refresh
token.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping, Optional, Union

from google.cloud.firestore import AsyncClient
from pydantic import ValidationError

from oauth2_firestore.clients.firestore import (
    DEFAULT_TIMEOUT_SECONDS,
    FirestoreCollectionClient,
    TokenNotFoundError,
    check_deadline,
)
from oauth2_firestore.models.token import TokenInfo

KEY_CODE = "Code"
KEY_ACCESS = "Access"
KEY_REFRESH = "Refresh"


class InvalidTokenInfoError(ValueError):
    """Raised when token info is missing or holds only zero values."""


class TokenStore:
    """Persist and look up OAuth2 tokens by code, access or refresh value."""

    def __init__(self, collection_client: FirestoreCollectionClient) -> None:
        self._documents = collection_client

    @property
    def collection(self) -> str:
        return self._documents.collection

    @property
    def timeout(self) -> float:
        return self._documents.timeout

    async def create(self, info: Any, *, timeout: Optional[float] = None) -> None:
        """Validate ``info`` and store it as a new token document."""
        token = _coerce_token_info(info)
        await self._documents.put(token.to_document(), timeout=timeout)

    async def get_by_code(self, code: str, *, timeout: Optional[float] = None) -> TokenInfo:
        return await self._get(KEY_CODE, code, timeout)

    async def get_by_access(self, access: str, *, timeout: Optional[float] = None) -> TokenInfo:
        return await self._get(KEY_ACCESS, access, timeout)

    async def get_by_refresh(self, refresh: str, *, timeout: Optional[float] = None) -> TokenInfo:
        return await self._get(KEY_REFRESH, refresh, timeout)

    async def remove_by_code(self, code: str, *, timeout: Optional[float] = None) -> None:
        await self._remove(KEY_CODE, code, timeout)

    async def remove_by_access(self, access: str, *, timeout: Optional[float] = None) -> None:
        await self._remove(KEY_ACCESS, access, timeout)

    async def remove_by_refresh(self, refresh: str, *, timeout: Optional[float] = None) -> None:
        await self._remove(KEY_REFRESH, refresh, timeout)

    async def _get(self, key: str, value: str, timeout: Optional[float]) -> TokenInfo:
        check_deadline("find_one", timeout)
        # Tokens stored without this key must never match an empty lookup.
        if not value:
            raise TokenNotFoundError(f"No token matches an empty {key}.")
        document = await self._documents.find_one(key, value, timeout=timeout)
        return TokenInfo.from_document(document)

    async def _remove(self, key: str, value: str, timeout: Optional[float]) -> None:
        check_deadline("delete_one", timeout)
        if not value:
            return
        await self._documents.delete_one(key, value, timeout=timeout)


def _coerce_token_info(info: Any) -> TokenInfo:
    """Convert caller input into a non-zero ``TokenInfo``."""
    if info is None:
        raise InvalidTokenInfoError("Token info must be provided.")

    if isinstance(info, TokenInfo):
        token = info
    else:
        try:
            if isinstance(info, Mapping):
                token = TokenInfo.model_validate(dict(info))
            else:
                token = TokenInfo.model_validate(info, from_attributes=True)
        except ValidationError as exc:
            raise InvalidTokenInfoError(f"Token info could not be read: {exc}") from exc

    if token.is_zero():
        raise InvalidTokenInfoError("Token info holds only zero values.")
    return token


def new(client: AsyncClient, collection: str) -> TokenStore:
    """
    Return a token store over ``collection`` with the default timeout.

    The Firestore client is never closed by the store.
    """
    return new_with_timeout(client, collection, DEFAULT_TIMEOUT_SECONDS)


def new_with_timeout(
    client: AsyncClient,
    collection: str,
    timeout: Union[float, timedelta],
) -> TokenStore:
    """
    Return a token store whose Firestore operations are cancelled after ``timeout``.

    The Firestore client is never closed by the store.
    """
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    return TokenStore(FirestoreCollectionClient(client, collection, timeout=timeout))


__all__ = [
    "InvalidTokenInfoError",
    "KEY_ACCESS",
    "KEY_CODE",
    "KEY_REFRESH",
    "TokenStore",
    "new",
    "new_with_timeout",
]
