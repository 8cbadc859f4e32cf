"""Pytest configuration and an in-process fake of the Firestore async client."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from itertools import count
from typing import Any

import pytest

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from oauth2_firestore.clients import firestore as firestore_module
from oauth2_firestore.clients.firestore import FirestoreCollectionClient
from oauth2_firestore.services.token_store import TokenStore

COLLECTION = "oauth2-tokens"


class FakeDocumentReference:
    def __init__(self, collection: "FakeCollection", document_id: str) -> None:
        self.collection = collection
        self.id = document_id


class FakeSnapshot:
    def __init__(self, reference: FakeDocumentReference, data: dict[str, Any]) -> None:
        self.reference = reference
        self._data = data

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


class FakeQuery:
    def __init__(self, collection: "FakeCollection", field_filter, limit: int | None = None) -> None:
        self._collection = collection
        self._filter = field_filter
        self._limit = limit

    def limit(self, count: int) -> "FakeQuery":
        return FakeQuery(self._collection, self._filter, count)

    async def get(self, transaction=None) -> list[FakeSnapshot]:
        await self._collection.client.round_trip()
        assert self._filter.op_string == "=="
        field, value = self._filter.field_path, self._filter.value
        matches = [
            FakeSnapshot(FakeDocumentReference(self._collection, document_id), data)
            for document_id, data in self._collection.documents.items()
            if field in data and data[field] == value
        ]
        if self._limit is not None:
            matches = matches[: self._limit]
        return matches


class FakeCollection:
    def __init__(self, client: "FakeAsyncClient", name: str) -> None:
        self.client = client
        self.name = name
        self.documents: dict[str, dict[str, Any]] = {}

    def where(self, *, filter) -> FakeQuery:  # noqa: A002 - mirrors the Firestore signature
        return FakeQuery(self, filter)

    async def add(self, document_data: dict[str, Any]):
        await self.client.round_trip()
        reference = FakeDocumentReference(self, f"doc-{next(self.client.ids)}")
        self.documents[reference.id] = dict(document_data)
        return datetime.now(timezone.utc), reference


class FakeTransaction:
    """Buffers deletes and speaks the begin/commit/rollback protocol of the real decorator."""

    _read_only = False
    _max_attempts = 1

    def __init__(self) -> None:
        self.deletes: list[FakeDocumentReference] = []
        self.events: list[str] = []
        self._id: bytes | None = None

    def delete(self, reference: FakeDocumentReference) -> None:
        self.deletes.append(reference)

    def commit(self) -> None:
        for reference in self.deletes:
            reference.collection.documents.pop(reference.id, None)
        self.events.append("commit")

    def _clean_up(self) -> None:
        self.deletes = []
        self._id = None

    async def _begin(self, retry_id=None) -> None:
        self._id = b"fake-transaction"
        self.events.append("begin")

    async def _commit(self) -> list:
        self.commit()
        self._clean_up()
        return []

    async def _rollback(self) -> None:
        self._clean_up()
        self.events.append("rollback")


class FakeAsyncClient:
    """Records round trips and how many overlap."""

    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}
        self.ids = count(1)
        self.delay = 0.0
        self.error: Exception | None = None
        self.round_trips = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.transactions: list[FakeTransaction] = []

    def collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]

    def transaction(self) -> FakeTransaction:
        transaction = FakeTransaction()
        self.transactions.append(transaction)
        return transaction

    def documents(self, name: str = COLLECTION) -> list[dict[str, Any]]:
        return list(self.collection(name).documents.values())

    async def round_trip(self) -> None:
        self.round_trips += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
        finally:
            self.in_flight -= 1


def _fake_transactional(func):
    async def _run(transaction: FakeTransaction, *args, **kwargs):
        result = await func(transaction, *args, **kwargs)
        transaction.commit()
        return result

    return _run


@pytest.fixture(autouse=True)
def fake_transactions(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("real_transactions"):
        return
    monkeypatch.setattr(firestore_module, "async_transactional", _fake_transactional)


@pytest.fixture
def fake_client() -> FakeAsyncClient:
    return FakeAsyncClient()


@pytest.fixture
def collection_client(fake_client: FakeAsyncClient) -> FirestoreCollectionClient:
    return FirestoreCollectionClient(fake_client, COLLECTION, timeout=1.0)


@pytest.fixture
def token_store(collection_client: FirestoreCollectionClient) -> TokenStore:
    return TokenStore(collection_client)
