"""Typed blob storage for the housekeeping app."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger

from hkapi.core.config.settings import HKSettings
from hkapi.core.exceptions import StoreError, ValidationError
from hkapi.repositories import HousekeepingRepository
from hkapi.utils.clock import Clock, format_local_timestamp, local_now
from web.dependencies import get_app_settings, get_clock, get_housekeeping_repository
from web.models import SaveRequest

router = APIRouter(tags=["housekeeping"])


def _require_type(data_type: Optional[str]) -> str:
    if not data_type:
        raise ValidationError("Missing type", field="type")
    return data_type


@router.post("/save")
async def save(
    body: SaveRequest,
    housekeeping: HousekeepingRepository = Depends(get_housekeeping_repository),
    settings: HKSettings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
) -> Dict[str, Any]:
    """
    Save a blob under its type, replacing the previous one.

    Returns:
        Saved type
    """
    data_type = _require_type(body.type)
    timestamp = body.timestamp or format_local_timestamp(local_now(settings.timezone, clock))
    await housekeeping.save(data_type, body.data, timestamp)
    logger.info(f"Saved: {data_type}")
    return {"success": True, "type": data_type}


@router.get("/load")
async def load(
    type: Optional[str] = Query(default=None),
    housekeeping: HousekeepingRepository = Depends(get_housekeeping_repository),
) -> Dict[str, Any]:
    record = await housekeeping.load(_require_type(type))
    if record is None:
        return {"data": None}
    return record


@router.get("/list")
async def list_types(
    housekeeping: HousekeepingRepository = Depends(get_housekeeping_repository),
) -> Dict[str, Any]:
    """List saved types. Store failures yield an empty list."""
    try:
        types = await housekeeping.list_types()
    except StoreError as e:
        logger.warning(f"Listing housekeeping types failed: {e}")
        types = []
    return {"types": types}


@router.delete("/delete")
async def delete(
    type: Optional[str] = Query(default=None),
    housekeeping: HousekeepingRepository = Depends(get_housekeeping_repository),
) -> Dict[str, Any]:
    await housekeeping.delete(_require_type(type))
    return {"success": True}
