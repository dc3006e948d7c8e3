"""Booking notification listing and deletion."""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from hkapi.constants import Notifications
from hkapi.core.config.settings import HKSettings
from hkapi.core.exceptions import ValidationError
from hkapi.repositories import NotificationRepository
from hkapi.utils.clock import ensure_aware
from web.dependencies import get_app_settings, get_notification_repository

router = APIRouter(prefix="/notifications", tags=["notifications"])


def parse_since(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 ``since`` value; naive values are taken as UTC."""
    if not value:
        return None
    try:
        return ensure_aware(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError:
        raise ValidationError("Invalid since timestamp", field="since") from None


def parse_limit(value: Optional[str], default: int) -> int:
    """Parse ``limit``; non-numeric or non-positive values fall back to the default."""
    try:
        limit = int(value) if value is not None else 0
    except ValueError:
        limit = 0
    if limit <= 0:
        limit = default
    return min(limit, Notifications.MAX_LIST_LIMIT)


@router.get("")
async def list_notifications(
    since: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    notifications: NotificationRepository = Depends(get_notification_repository),
    settings: HKSettings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """
    List notifications newest first.

    Returns:
        Matching notifications and their count
    """
    records = await notifications.list_recent(
        since=parse_since(since), limit=parse_limit(limit, settings.notification_list_limit)
    )
    return {"success": True, "count": len(records), "notifications": records}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    notifications: NotificationRepository = Depends(get_notification_repository),
) -> Dict[str, Any]:
    await notifications.delete(notification_id)
    return {"success": True}


@router.delete("")
async def delete_all_notifications(
    notifications: NotificationRepository = Depends(get_notification_repository),
) -> Dict[str, Any]:
    deleted = await notifications.delete_all()
    return {"success": True, "deleted": deleted}
