"""Inbound booking webhook from the property-management system."""

import json
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from loguru import logger

from hkapi.constants import Notifications
from hkapi.services.cleanup_service import NotificationRetentionSweeper
from hkapi.services.webhooks import BookingIngestor, IngestResult
from web.dependencies import get_booking_ingestor, get_retention_sweeper

router = APIRouter(tags=["webhooks"])


@router.post(Notifications.WEBHOOK_PATH)
async def receive_booking_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    ingestor: BookingIngestor = Depends(get_booking_ingestor),
    sweeper: NotificationRetentionSweeper = Depends(get_retention_sweeper),
) -> Dict[str, Any]:
    """
    Record a booking event. Always answers 200 so the sender keeps the
    integration enabled; failures are reported in the body.

    Returns:
        Ingestion outcome
    """
    raw = await request.body()
    try:
        payload = json.loads(raw) if raw.strip() else {}
    except (ValueError, RecursionError) as e:
        logger.warning(f"Webhook body is not valid JSON: {e}")
        return IngestResult(success=False, error="Invalid JSON body").to_response()

    logger.debug(f"Webhook received: {payload}")
    result = await ingestor.ingest(payload)

    if result.success:
        background_tasks.add_task(sweeper.sweep)
    return result.to_response()
