"""In-process document store for tests and local development."""

import asyncio
import copy
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from loguru import logger

from hkapi.core.exceptions import StoreNotConnectedError
from hkapi.storage.base import SERVER_TIMESTAMP, Document, DocumentStore, Filter
from hkapi.utils.clock import Clock, utc_now

_MISSING = object()


def _matches(data: Mapping[str, Any], flt: Filter) -> bool:
    value = data.get(flt.field, _MISSING)
    if value is _MISSING:
        return False
    if flt.op == "==":
        return bool(value == flt.value)
    if value is None:
        return False
    try:
        if flt.op == "<":
            return bool(value < flt.value)
        return bool(value > flt.value)
    except TypeError:
        return False


class InMemoryDocumentStore(DocumentStore):
    """
    Dictionary-backed DocumentStore.

    All writes are serialised by one asyncio lock, so compare-and-set is
    atomic within the process. Data is deep-copied on the way in and out.
    """

    def __init__(self, clock: Clock = utc_now, auto_connect: bool = True):
        """
        Initialize in-memory store.

        Args:
            clock: Source of server timestamps
            auto_connect: Start in the connected state
        """
        self._clock = clock
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()
        self._connected = auto_connect

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True
        logger.info("In-memory document store ready")

    async def close(self) -> None:
        self._connected = False

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise StoreNotConnectedError()

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def _resolve(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        now = self._clock()
        return {
            key: (now if value is SERVER_TIMESTAMP else copy.deepcopy(value))
            for key, value in data.items()
        }

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        self._ensure_connected()
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return Document(id=doc_id, data=copy.deepcopy(data))

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        self._ensure_connected()
        async with self._lock:
            self._collection(collection)[doc_id] = self._resolve(data)

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        self._ensure_connected()
        doc_id = uuid.uuid4().hex[:20]
        async with self._lock:
            self._collection(collection)[doc_id] = self._resolve(data)
        return doc_id

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        self._ensure_connected()
        async with self._lock:
            current = self._collection(collection).get(doc_id)
            if current is None:
                return False
            if expected and any(current.get(k, _MISSING) != v for k, v in expected.items()):
                return False
            current.update(self._resolve(fields))
            return True

    async def delete(
        self, collection: str, doc_id: str, expected: Optional[Mapping[str, Any]] = None
    ) -> bool:
        self._ensure_connected()
        async with self._lock:
            docs = self._collection(collection)
            current = docs.get(doc_id)
            if current is None:
                return False
            if expected and any(current.get(k, _MISSING) != v for k, v in expected.items()):
                return False
            del docs[doc_id]
            return True

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        self._ensure_connected()
        rows = [
            (doc_id, data)
            for doc_id, data in self._collection(collection).items()
            if all(_matches(data, f) for f in filters)
        ]
        if order_by is not None:
            rows = [row for row in rows if row[1].get(order_by) is not None]
            rows.sort(key=lambda row: row[1][order_by], reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return [Document(id=doc_id, data=copy.deepcopy(data)) for doc_id, data in rows]

    async def list_ids(self, collection: str) -> List[str]:
        self._ensure_connected()
        return sorted(self._collection(collection).keys())

    async def delete_many(self, collection: str, doc_ids: Iterable[str]) -> int:
        self._ensure_connected()
        async with self._lock:
            docs = self._collection(collection)
            removed = 0
            for doc_id in set(doc_ids):
                if docs.pop(doc_id, None) is not None:
                    removed += 1
            return removed
