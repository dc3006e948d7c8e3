"""Booking notification constants."""

from typing import Final


class BookingActions:
    """Action kinds assigned to inbound booking events."""

    CANCELLED: Final[str] = "cancelled"
    NEW_REQUEST: Final[str] = "new_request"
    NEW_BOOKING: Final[str] = "new_booking"
    MODIFIED: Final[str] = "modified"


class Notifications:
    """Booking notification record defaults."""

    TYPE: Final[str] = "booking_update"
    UNKNOWN_GUEST: Final[str] = "Unknown Guest"
    RETENTION_HOURS: Final[int] = 24
    DEFAULT_LIST_LIMIT: Final[int] = 50
    MAX_LIST_LIMIT: Final[int] = 500
    WEBHOOK_PATH: Final[str] = "/webhook/booking"


class RoomConfig:
    """Room capacity setting limits."""

    DOCUMENT_ID: Final[str] = "total_rooms"
    DEFAULT_TOTAL_ROOMS: Final[int] = 45
    MIN_ROOMS: Final[int] = 1
    MAX_ROOMS: Final[int] = 100
