"""Inbound booking webhook ingestion."""

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from loguru import logger

from hkapi.constants import BookingActions, Notifications
from hkapi.repositories.notification_repository import NotificationRepository
from hkapi.storage.base import SERVER_TIMESTAMP

PASSTHROUGH_FIELDS = ("roomId", "arrival", "departure", "status")


def classify_action(payload: Mapping[str, Any]) -> str:
    """
    Classify a booking event. The first matching rule wins.

    Args:
        payload: Inbound webhook body

    Returns:
        One of the BookingActions values
    """
    if payload.get("cancelTime"):
        return BookingActions.CANCELLED
    if payload.get("status") == "request":
        return BookingActions.NEW_REQUEST
    booking_time = payload.get("bookingTime")
    modified_time = payload.get("modifiedTime")
    if booking_time and modified_time and booking_time == modified_time:
        return BookingActions.NEW_BOOKING
    return BookingActions.MODIFIED


def derive_guest_name(payload: Mapping[str, Any]) -> str:
    first_name = payload.get("firstName")
    if not first_name:
        return Notifications.UNKNOWN_GUEST
    return f"{first_name} {payload.get('lastName') or ''}".strip()


def build_notification(payload: Mapping[str, Any], default_property_id: int) -> Dict[str, Any]:
    """
    Normalize a webhook body into a notification record.

    Args:
        payload: Inbound webhook body (already a mapping)
        default_property_id: Property used when the body has none

    Returns:
        Record with a SERVER_TIMESTAMP ``receivedAt``
    """
    record: Dict[str, Any] = {
        "type": Notifications.TYPE,
        "bookingId": payload.get("id") or payload.get("bookingId") or None,
        "propertyId": payload.get("propertyId") or default_property_id,
        "action": classify_action(payload),
        "guestName": derive_guest_name(payload),
    }
    for field in PASSTHROUGH_FIELDS:
        record[field] = payload.get(field) or None
    record["receivedAt"] = SERVER_TIMESTAMP
    record["processed"] = False
    return record


def dedup_key(payload: Mapping[str, Any]) -> Optional[str]:
    """
    Stable notification id for one upstream booking revision.

    Returns:
        None when the body lacks a booking id or modifiedTime
    """
    booking_id = payload.get("id") or payload.get("bookingId")
    modified_time = payload.get("modifiedTime")
    if not booking_id or not modified_time:
        return None
    digest = hashlib.sha256(f"{booking_id}:{modified_time}".encode("utf-8")).hexdigest()
    return digest[:20]


@dataclass
class IngestResult:
    """Outcome of one webhook ingestion."""

    success: bool
    notification_id: Optional[str] = None
    error: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        """Render the body returned to the webhook sender."""
        if self.success:
            return {
                "success": True,
                "notificationId": self.notification_id,
                "message": "Webhook received",
            }
        return {"success": False, "error": self.error}


class BookingIngestor:
    """Turns PMS booking webhooks into stored notifications."""

    def __init__(
        self,
        notifications: NotificationRepository,
        default_property_id: int = 279646,
        dedup_enabled: bool = False,
    ):
        """
        Initialize booking ingestor.

        Args:
            notifications: Notification storage
            default_property_id: Property used when a webhook omits propertyId
            dedup_enabled: Upsert by booking revision instead of appending
        """
        self.notifications = notifications
        self.default_property_id = default_property_id
        self.dedup_enabled = dedup_enabled

    async def ingest(self, payload: Any) -> IngestResult:
        """
        Store one webhook body. Never raises.

        Args:
            payload: Decoded JSON body of any shape

        Returns:
            IngestResult describing the outcome
        """
        try:
            fields: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
            record = build_notification(fields, self.default_property_id)
            record["rawData"] = payload

            key = dedup_key(fields) if self.dedup_enabled else None
            if key is not None:
                notification_id = await self.notifications.upsert(key, record)
            else:
                notification_id = await self.notifications.add(record)
        except Exception as e:
            logger.error(f"Webhook ingestion failed: {e}")
            return IngestResult(success=False, error=str(e))

        logger.info(f"Notification saved: {notification_id} ({record['action']})")
        return IngestResult(success=True, notification_id=notification_id)
