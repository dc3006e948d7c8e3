"""Repository pattern implementations over the document store."""

from hkapi.repositories.base import BaseRepository
from hkapi.repositories.housekeeping_repository import HousekeepingRepository
from hkapi.repositories.notification_repository import NotificationRepository
from hkapi.repositories.otp_repository import OtpChallenge, OtpRepository
from hkapi.repositories.room_config_repository import RoomConfigRepository
from hkapi.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "HousekeepingRepository",
    "NotificationRepository",
    "OtpChallenge",
    "OtpRepository",
    "RoomConfigRepository",
    "UserRepository",
]
