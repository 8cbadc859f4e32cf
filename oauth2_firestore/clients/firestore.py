"""
Firestore collection wrapper used to persist token documents.

Every operation holds a per-instance lock for its whole duration and is
bounded by a timeout, so at most one Firestore round trip is in flight per
client instance.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from google.cloud.firestore import AsyncClient, AsyncTransaction, async_transactional
from google.cloud.firestore_v1.base_query import FieldFilter

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0


class TokenNotFoundError(LookupError):
    """Raised when no stored document matches a lookup."""


class DeadlineExceededError(TimeoutError):
    """Raised when an operation does not finish before its deadline."""


def check_deadline(operation: str, timeout: Optional[float]) -> None:
    """Fail fast when the caller's remaining time is already spent."""
    if timeout is not None and timeout <= 0:
        raise DeadlineExceededError(
            f"Deadline already exceeded before Firestore {operation} started."
        )


class FirestoreCollectionClient:
    """Serialized create/query/delete primitives over one Firestore collection."""

    def __init__(
        self,
        client: AsyncClient,
        collection: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if timeout <= 0:
            raise ValueError("Firestore operation timeout must be positive.")
        # The client is owned by the caller and never closed here.
        self._client = client
        self._collection = collection
        self._timeout = timeout
        self._lock = asyncio.Lock()

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def timeout(self) -> float:
        return self._timeout

    async def put(self, document: Dict[str, Any], *, timeout: Optional[float] = None) -> str:
        """Insert ``document`` as a new Firestore document and return its id."""

        async def _add() -> str:
            _, reference = await self._client.collection(self._collection).add(document)
            return reference.id

        document_id = await self._run("put", _add, timeout)
        logger.debug("Stored token document %s in %s", document_id, self._collection)
        return document_id

    async def find_one(
        self, key: str, value: Any, *, timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Return the fields of one document whose ``key`` equals ``value``.

        When several documents match, which one is returned is unspecified.
        """

        async def _find() -> Optional[Dict[str, Any]]:
            snapshots = await self._query(key, value).get()
            if not snapshots:
                return None
            return snapshots[0].to_dict() or {}

        document = await self._run("find_one", _find, timeout)
        if document is None:
            logger.debug("No document in %s matched on %s", self._collection, key)
            raise TokenNotFoundError(
                f"No document in collection {self._collection!r} matches on {key}."
            )
        return document

    async def delete_one(
        self, key: str, value: Any, *, timeout: Optional[float] = None
    ) -> bool:
        """
        Delete the first document whose ``key`` equals ``value``.

        Lookup and delete run in one transaction. Returns False when nothing
        matched, which is not an error.
        """

        async def _delete() -> bool:
            query = self._query(key, value)

            @async_transactional
            async def _delete_first(transaction: AsyncTransaction) -> bool:
                snapshots = await query.get(transaction=transaction)
                if not snapshots:
                    return False
                transaction.delete(snapshots[0].reference)
                return True

            return await _delete_first(self._client.transaction())

        deleted = await self._run("delete_one", _delete, timeout)
        logger.debug(
            "Delete on %s keyed by %s %s",
            self._collection,
            key,
            "removed a document" if deleted else "matched nothing",
        )
        return deleted

    def _query(self, key: str, value: Any):
        return (
            self._client.collection(self._collection)
            .where(filter=FieldFilter(key, "==", value))
            .limit(1)
        )

    async def _run(
        self,
        operation: str,
        func: Callable[[], Awaitable[T]],
        timeout: Optional[float],
    ) -> T:
        """Run ``func`` under the lock, bounded by the tighter of both deadlines."""
        loop = asyncio.get_running_loop()
        check_deadline(operation, timeout)
        deadline = None if timeout is None else loop.time() + timeout

        async with self._lock:
            budget = self._timeout
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise DeadlineExceededError(
                        f"Deadline exceeded while waiting to run Firestore {operation}."
                    )
                budget = min(budget, remaining)
            store_timeouts: list[BaseException] = []

            async def _call() -> T:
                try:
                    return await func()
                except asyncio.TimeoutError as exc:
                    store_timeouts.append(exc)
                    raise

            try:
                return await asyncio.wait_for(_call(), timeout=budget)
            except asyncio.TimeoutError as exc:
                # Raised by Firestore itself, not by the budget running out.
                if store_timeouts:
                    raise
                logger.warning(
                    "Firestore %s on %s exceeded its %.3fs deadline",
                    operation,
                    self._collection,
                    budget,
                )
                raise DeadlineExceededError(
                    f"Firestore {operation} did not finish within {budget:.3f}s."
                ) from exc


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "DeadlineExceededError",
    "FirestoreCollectionClient",
    "TokenNotFoundError",
    "check_deadline",
]
