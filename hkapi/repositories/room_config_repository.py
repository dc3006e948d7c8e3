"""Room capacity configuration repository."""

from typing import Any, Dict, Optional

from hkapi.constants import Collections, RoomConfig
from hkapi.repositories.base import BaseRepository
from hkapi.storage.base import SERVER_TIMESTAMP


class RoomConfigRepository(BaseRepository):
    """Single-document store for the property's total room count."""

    collection = Collections.ROOM_CONFIG

    async def get(self) -> Optional[Dict[str, Any]]:
        """Stored capacity record, or None when never configured."""
        doc = await self.store.get(self.collection, RoomConfig.DOCUMENT_ID)
        return doc.data if doc else None

    async def set_total_rooms(self, count: int, reason: str, updated_by: str) -> None:
        await self.store.set(
            self.collection,
            RoomConfig.DOCUMENT_ID,
            {
                "count": count,
                "reason": reason,
                "updatedBy": updated_by,
                "updatedAt": SERVER_TIMESTAMP,
            },
        )
