"""Request models for the HTTP API."""

from .auth import SendOtpRequest, VerifyOtpRequest
from .housekeeping import SaveRequest
from .room_config import RoomConfigUpdate
from .users import UserPayload

__all__ = [
    "RoomConfigUpdate",
    "SaveRequest",
    "SendOtpRequest",
    "UserPayload",
    "VerifyOtpRequest",
]
