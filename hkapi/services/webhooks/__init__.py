"""Inbound webhook processing."""

from .booking_ingestor import (
    BookingIngestor,
    IngestResult,
    build_notification,
    classify_action,
    dedup_key,
    derive_guest_name,
)

__all__ = [
    "BookingIngestor",
    "IngestResult",
    "build_notification",
    "classify_action",
    "dedup_key",
    "derive_guest_name",
]
