"""Health check route."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from hkapi.constants import Notifications
from hkapi.core.config.settings import HKSettings
from hkapi.services.cleanup_service import NotificationRetentionSweeper
from hkapi.utils.clock import Clock, format_local_timestamp, local_now
from web.dependencies import get_app_settings, get_clock, get_retention_sweeper

router = APIRouter(tags=["health"])


@router.get("/")
async def health_check(
    settings: HKSettings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
    sweeper: NotificationRetentionSweeper = Depends(get_retention_sweeper),
) -> Dict[str, Any]:
    """
    Service status with the property's local date and time.

    Returns:
        Status dictionary
    """
    now_utc = clock()
    now_local = local_now(settings.timezone, lambda: now_utc)
    return {
        "status": f"{settings.property_name} HK API running",
        "timezone": settings.timezone,
        "todayLocal": now_local.date().isoformat(),
        "timestampLocal": format_local_timestamp(now_local),
        "timestampUTC": now_utc.isoformat(),
        "emailConfigured": settings.email_configured,
        "webhookEndpoint": Notifications.WEBHOOK_PATH,
        "retention": sweeper.get_status(),
    }
