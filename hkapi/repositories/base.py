"""Base repository class."""

from typing import Any, Dict, List, Optional

from hkapi.storage.base import DocumentStore


class BaseRepository:
    """Base repository bound to one collection of the document store."""

    collection: str = ""

    def __init__(self, store: DocumentStore):
        """
        Initialize repository with a document store.

        Args:
            store: DocumentStore instance
        """
        self.store = store

    async def get_by_id(self, id: str) -> Optional[Dict[str, Any]]:
        """
        Get a document as a flat dict including its id.

        Args:
            id: Document ID

        Returns:
            Document dict or None if not found
        """
        doc = await self.store.get(self.collection, id)
        return doc.to_dict() if doc else None

    async def get_all(self) -> List[Dict[str, Any]]:
        """
        Get every document in the collection.

        Returns:
            List of document dicts
        """
        docs = await self.store.query(self.collection)
        return [doc.to_dict() for doc in docs]

    async def delete(self, id: str) -> bool:
        """
        Delete a document by ID.

        Args:
            id: Document ID

        Returns:
            True if a document was removed
        """
        return await self.store.delete(self.collection, id)
