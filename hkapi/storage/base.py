"""Document store contract shared by every persistence backend."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

FILTER_OPERATORS = frozenset({"==", "<", ">"})


class _ServerTimestamp:
    """Sentinel replaced by the store's own clock when a document is written."""

    _instance: Optional["_ServerTimestamp"] = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass
class Document:
    """A stored document: its id plus its field data."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into a single mapping with the id included."""
        return {"id": self.id, **self.data}


@dataclass(frozen=True)
class Filter:
    """A single field predicate for query()."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")


class DocumentStore(ABC):
    """
    Async document store keyed by (collection, id).

    Implementations must make update() and delete() with ``expected`` a
    single atomic compare-and-set, and delete_many() all-or-nothing.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True once connect() has completed."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the underlying connection(s)."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection(s)."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """
        Fetch one document.

        Returns:
            Document or None if not found
        """

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Create or fully replace a document."""

    @abstractmethod
    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        """
        Create a document with a store-assigned id.

        Returns:
            The new document id
        """

    @abstractmethod
    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Merge fields into an existing document.

        Args:
            collection: Collection name
            doc_id: Document id
            fields: Fields to overwrite
            expected: Field values the stored document must still hold

        Returns:
            False if the document is missing or ``expected`` no longer matches
        """

    @abstractmethod
    async def delete(
        self, collection: str, doc_id: str, expected: Optional[Mapping[str, Any]] = None
    ) -> bool:
        """
        Delete a document. Deleting a missing document is a no-op.

        Returns:
            True if a document was removed
        """

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """
        Run a filtered, ordered query.

        Documents lacking a filtered or ordered field are excluded.
        """

    async def query_ids(self, collection: str, filters: Sequence[Filter] = ()) -> List[str]:
        """IDs of the documents matching ``filters``, without their data."""
        return [doc.id for doc in await self.query(collection, filters)]

    @abstractmethod
    async def list_ids(self, collection: str) -> List[str]:
        """List every document id in a collection."""

    @abstractmethod
    async def delete_many(self, collection: str, doc_ids: Iterable[str]) -> int:
        """
        Delete several documents as one all-or-nothing batch.

        Missing ids are ignored.

        Returns:
            Number of documents removed
        """
