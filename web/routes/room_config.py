"""Room capacity configuration routes."""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from loguru import logger

from hkapi.constants import RoomConfig
from hkapi.core.config.settings import HKSettings
from hkapi.core.exceptions import ValidationError
from hkapi.repositories import RoomConfigRepository
from web.dependencies import get_app_settings, get_room_config_repository
from web.models import RoomConfigUpdate

router = APIRouter(prefix="/room-config", tags=["room-config"])


def validate_total_rooms(value: Any) -> int:
    """
    Check a room count is an integer in the allowed range.

    Raises:
        ValidationError: For booleans, non-integers or out-of-range values
    """
    if (
        isinstance(value, bool)
        or not isinstance(value, int)
        or not RoomConfig.MIN_ROOMS <= value <= RoomConfig.MAX_ROOMS
    ):
        raise ValidationError(
            f"totalRooms must be a number between {RoomConfig.MIN_ROOMS} and {RoomConfig.MAX_ROOMS}",
            field="totalRooms",
        )
    return value


@router.get("")
async def get_room_config(
    room_config: RoomConfigRepository = Depends(get_room_config_repository),
    settings: HKSettings = Depends(get_app_settings),
) -> Dict[str, Any]:
    record = await room_config.get()
    if record is None:
        return {"success": True, "totalRooms": settings.default_total_rooms, "source": "default"}
    return {
        "success": True,
        "totalRooms": record.get("count") or settings.default_total_rooms,
        "lastUpdated": record.get("updatedAt"),
        "updatedBy": record.get("updatedBy"),
        "reason": record.get("reason"),
        "source": "store",
    }


@router.post("")
async def set_room_config(
    body: RoomConfigUpdate,
    room_config: RoomConfigRepository = Depends(get_room_config_repository),
) -> Dict[str, Any]:
    """
    Set the property's total room count.

    Returns:
        The stored count
    """
    total_rooms = validate_total_rooms(body.totalRooms)
    reason = body.reason or "Manual update"
    updated_by = body.updatedBy or "system"
    await room_config.set_total_rooms(total_rooms, reason, updated_by)
    logger.info(f"Room count set to {total_rooms} by {updated_by} ({reason})")
    return {"success": True, "totalRooms": total_rooms}
