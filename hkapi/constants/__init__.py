"""Unified constants for HK API.

All classes can be imported directly from this package:
    from hkapi.constants import OTP, Collections, Notifications
"""

from .database import Collections, Database
from .notifications import BookingActions, Notifications, RoomConfig
from .otp import OTP

__all__ = [
    "OTP",
    "Collections",
    "Database",
    "BookingActions",
    "Notifications",
    "RoomConfig",
]
