"""Booking notification repository implementation."""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from loguru import logger

from hkapi.constants import Collections
from hkapi.constants import Database as DbConstants
from hkapi.repositories.base import BaseRepository
from hkapi.storage.base import Filter


def chunked(ids: List[str], size: int) -> Iterable[List[str]]:
    """Split ids into lists of at most ``size`` items."""
    for start in range(0, len(ids), size):
        yield ids[start : start + size]


class NotificationRepository(BaseRepository):
    """Repository for booking notifications."""

    collection = Collections.NOTIFICATIONS

    async def add(self, notification: Mapping[str, Any]) -> str:
        """
        Append a notification record.

        Returns:
            Store-assigned notification ID
        """
        return await self.store.add(self.collection, notification)

    async def upsert(self, notification_id: str, notification: Mapping[str, Any]) -> str:
        """
        Create or replace a notification under a caller-chosen ID.

        Returns:
            The notification ID
        """
        await self.store.set(self.collection, notification_id, notification)
        return notification_id

    async def list_recent(
        self, since: Optional[datetime] = None, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        List notifications newest first.

        Args:
            since: Only include records received strictly after this instant
            limit: Maximum number of records

        Returns:
            List of notification dicts
        """
        filters = [Filter("receivedAt", ">", since)] if since is not None else []
        docs = await self.store.query(
            self.collection, filters, order_by="receivedAt", descending=True, limit=limit
        )
        return [doc.to_dict() for doc in docs]

    async def find_ids_older_than(self, cutoff: datetime) -> List[str]:
        """IDs of notifications received strictly before ``cutoff``."""
        return await self.store.query_ids(self.collection, [Filter("receivedAt", "<", cutoff)])

    async def delete_many(self, ids: List[str]) -> int:
        """
        Delete notifications as one all-or-nothing batch.

        Returns:
            Number of records removed
        """
        return await self.store.delete_many(self.collection, ids)

    async def delete_all(self, batch_size: int = DbConstants.BATCH_SIZE) -> int:
        """
        Delete every notification in batches.

        Returns:
            Number of records removed
        """
        ids = await self.store.list_ids(self.collection)
        deleted = 0
        for batch in chunked(ids, batch_size):
            deleted += await self.store.delete_many(self.collection, batch)
        logger.info(f"Deleted all notifications ({deleted} records)")
        return deleted
