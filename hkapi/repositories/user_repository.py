"""User repository implementation."""

from typing import Any, Dict, Mapping, Optional

from loguru import logger

from hkapi.constants import Collections
from hkapi.repositories.base import BaseRepository
from hkapi.storage.base import SERVER_TIMESTAMP, Filter
from hkapi.utils.masking import mask_email


class UserRepository(BaseRepository):
    """Repository for staff user records. Profile fields are opaque."""

    collection = Collections.USERS

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Find the user owning an email address (exact match).

        The store does not enforce unique emails; when several records
        match, the first one returned by the store wins.

        Args:
            email: Email address

        Returns:
            User dict or None if not found
        """
        docs = await self.store.query(self.collection, [Filter("email", "==", email)], limit=2)
        if not docs:
            return None
        if len(docs) > 1:
            logger.warning(f"Multiple users share email {mask_email(email)}; using {docs[0].id}")
        return docs[0].to_dict()

    async def create(self, data: Mapping[str, Any]) -> str:
        """
        Create a user record.

        Args:
            data: Profile fields

        Returns:
            Created user ID
        """
        record = {k: v for k, v in data.items() if k != "id"}
        record["createdAt"] = SERVER_TIMESTAMP
        return await self.store.add(self.collection, record)

    async def update(self, id: str, data: Mapping[str, Any]) -> bool:
        """
        Merge profile fields into an existing user.

        Args:
            id: User ID
            data: Fields to overwrite

        Returns:
            True if updated, False if the user does not exist
        """
        fields = {k: v for k, v in data.items() if k != "id"}
        return await self.store.update(self.collection, id, fields)
