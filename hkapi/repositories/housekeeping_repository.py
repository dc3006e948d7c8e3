"""Housekeeping blob repository implementation."""

from typing import Any, Dict, List, Optional

from hkapi.constants import Collections
from hkapi.repositories.base import BaseRepository
from hkapi.storage.base import SERVER_TIMESTAMP


class HousekeepingRepository(BaseRepository):
    """Typed JSON blobs saved by the housekeeping app, one per type."""

    collection = Collections.HOUSEKEEPING

    async def save(self, data_type: str, data: Any, timestamp: str) -> None:
        await self.store.set(
            self.collection,
            data_type,
            {"data": data, "timestamp": timestamp, "updatedAt": SERVER_TIMESTAMP},
        )

    async def load(self, data_type: str) -> Optional[Dict[str, Any]]:
        doc = await self.store.get(self.collection, data_type)
        if doc is None:
            return None
        return {"data": doc.data.get("data"), "timestamp": doc.data.get("timestamp")}

    async def list_types(self) -> List[str]:
        return await self.store.list_ids(self.collection)
