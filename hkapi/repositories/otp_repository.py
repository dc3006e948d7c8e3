"""OTP challenge repository implementation."""

from datetime import datetime
from typing import Any, Dict, Optional

from hkapi.constants import Collections
from hkapi.repositories.base import BaseRepository
from hkapi.utils.clock import ensure_aware


class OtpChallenge:
    """Live OTP challenge entity, one per email address."""

    def __init__(
        self,
        email: str,
        code: str,
        expires_at: datetime,
        attempts: int = 0,
        user_id: Optional[str] = None,
    ):
        """Initialize OTP challenge entity."""
        self.email = email
        self.code = code
        self.expires_at = ensure_aware(expires_at)
        self.attempts = attempts
        self.user_id = user_id

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` is past the expiry instant."""
        return ensure_aware(now) > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert challenge to its stored form."""
        return {
            "code": self.code,
            "expiresAt": self.expires_at,
            "attempts": self.attempts,
            "userId": self.user_id,
        }

    def guard(self) -> Dict[str, Any]:
        """Field values a conditional write expects to still be stored."""
        return {"code": self.code, "attempts": self.attempts}


class OtpRepository(BaseRepository):
    """Repository for OTP challenges keyed by email."""

    collection = Collections.OTP

    def _to_challenge(self, email: str, data: Dict[str, Any]) -> OtpChallenge:
        return OtpChallenge(
            email=email,
            code=str(data["code"]),
            expires_at=data["expiresAt"],
            attempts=int(data.get("attempts", 0)),
            user_id=data.get("userId"),
        )

    async def get(self, email: str) -> Optional[OtpChallenge]:
        """
        Get the live challenge for an email.

        Args:
            email: Email address

        Returns:
            OtpChallenge or None if none is stored
        """
        doc = await self.store.get(self.collection, email)
        if doc is None:
            return None
        return self._to_challenge(doc.id, doc.data)

    async def put(self, challenge: OtpChallenge) -> None:
        """Store a challenge, replacing any earlier one for the same email."""
        await self.store.set(self.collection, challenge.email, challenge.to_dict())

    async def record_failed_attempt(self, challenge: OtpChallenge, attempts: int) -> bool:
        """
        Persist a new attempt count if the challenge is unchanged.

        Args:
            challenge: Challenge as last read
            attempts: New attempt count

        Returns:
            False if another writer changed or removed the challenge first
        """
        return await self.store.update(
            self.collection, challenge.email, {"attempts": attempts}, expected=challenge.guard()
        )

    async def discard(self, challenge: OtpChallenge) -> bool:
        """
        Delete a challenge if it is unchanged since it was read.

        Returns:
            False if another writer changed or removed the challenge first
        """
        return await self.store.delete(self.collection, challenge.email, expected=challenge.guard())
