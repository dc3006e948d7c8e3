"""Tests for services/webhooks/booking_ingestor module."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from hkapi.core.exceptions import StoreUnavailableError
from hkapi.services.webhooks import (
    BookingIngestor,
    IngestResult,
    build_notification,
    classify_action,
    dedup_key,
    derive_guest_name,
)
from hkapi.storage import SERVER_TIMESTAMP


class TestClassifyAction:
    """Tests for the action priority chain."""

    def test_cancel_time_wins_over_request_status(self):
        assert classify_action({"cancelTime": "2026-01-10 10:00:00", "status": "request"}) == "cancelled"

    def test_cancel_time_wins_over_new_booking(self):
        payload = {
            "cancelTime": "2026-01-10 10:00:00",
            "bookingTime": "2026-01-09 08:00:00",
            "modifiedTime": "2026-01-09 08:00:00",
        }
        assert classify_action(payload) == "cancelled"

    def test_request_status(self):
        assert classify_action({"status": "request"}) == "new_request"

    def test_request_status_wins_over_new_booking(self):
        payload = {"status": "request", "bookingTime": "T", "modifiedTime": "T"}
        assert classify_action(payload) == "new_request"

    def test_equal_booking_and_modified_time(self):
        payload = {"status": "confirmed", "bookingTime": "2026-01-09 08:00:00", "modifiedTime": "2026-01-09 08:00:00"}
        assert classify_action(payload) == "new_booking"

    def test_differing_modified_time(self):
        payload = {"bookingTime": "2026-01-09 08:00:00", "modifiedTime": "2026-01-09 09:15:00"}
        assert classify_action(payload) == "modified"

    def test_missing_times_is_modified(self):
        assert classify_action({"bookingTime": "2026-01-09 08:00:00"}) == "modified"
        assert classify_action({}) == "modified"

    def test_empty_cancel_time_is_ignored(self):
        assert classify_action({"cancelTime": "", "status": "request"}) == "new_request"


class TestDeriveGuestName:
    """Tests for guest display names."""

    def test_first_and_last(self):
        assert derive_guest_name({"firstName": "Ana", "lastName": "Silva"}) == "Ana Silva"

    def test_first_only_is_trimmed(self):
        assert derive_guest_name({"firstName": "Ana"}) == "Ana"

    def test_whitespace_is_trimmed(self):
        assert derive_guest_name({"firstName": " Ana ", "lastName": "Silva "}) == "Ana  Silva"

    def test_missing_first_name(self):
        assert derive_guest_name({"lastName": "Silva"}) == "Unknown Guest"
        assert derive_guest_name({"firstName": ""}) == "Unknown Guest"


class TestBuildNotification:
    """Tests for notification normalization."""

    def test_full_payload(self):
        payload = {
            "id": 88123,
            "propertyId": 1001,
            "roomId": 42,
            "arrival": "2026-02-01",
            "departure": "2026-02-04",
            "status": "confirmed",
            "firstName": "Ana",
            "lastName": "Silva",
        }
        record = build_notification(payload, default_property_id=279646)

        assert record["type"] == "booking_update"
        assert record["bookingId"] == 88123
        assert record["propertyId"] == 1001
        assert record["roomId"] == 42
        assert record["arrival"] == "2026-02-01"
        assert record["departure"] == "2026-02-04"
        assert record["status"] == "confirmed"
        assert record["guestName"] == "Ana Silva"
        assert record["action"] == "modified"
        assert record["receivedAt"] is SERVER_TIMESTAMP
        assert record["processed"] is False

    def test_empty_payload_defaults(self):
        record = build_notification({}, default_property_id=279646)

        assert record["bookingId"] is None
        assert record["propertyId"] == 279646
        assert record["roomId"] is None
        assert record["arrival"] is None
        assert record["departure"] is None
        assert record["status"] is None
        assert record["guestName"] == "Unknown Guest"

    def test_booking_id_falls_back(self):
        assert build_notification({"bookingId": "B-7"}, 1)["bookingId"] == "B-7"
        assert build_notification({"id": 0, "bookingId": "B-7"}, 1)["bookingId"] == "B-7"


class TestDedupKey:
    """Tests for dedup keys."""

    def test_stable_for_same_revision(self):
        payload = {"id": 5, "modifiedTime": "2026-01-09 09:15:00"}
        assert dedup_key(payload) == dedup_key(dict(payload))
        assert len(dedup_key(payload)) == 20

    def test_changes_with_modified_time(self):
        assert dedup_key({"id": 5, "modifiedTime": "a"}) != dedup_key({"id": 5, "modifiedTime": "b"})

    def test_none_without_booking_or_time(self):
        assert dedup_key({"modifiedTime": "a"}) is None
        assert dedup_key({"id": 5}) is None


class TestIngestResult:
    """Tests for webhook response bodies."""

    def test_success_response(self):
        body = IngestResult(success=True, notification_id="abc").to_response()
        assert body == {"success": True, "notificationId": "abc", "message": "Webhook received"}

    def test_failure_response(self):
        body = IngestResult(success=False, error="boom").to_response()
        assert body == {"success": False, "error": "boom"}


class TestBookingIngestor:
    """Tests for BookingIngestor.ingest."""

    @pytest.mark.asyncio
    async def test_stores_notification(self, notifications, store, clock):
        ingestor = BookingIngestor(notifications)
        payload = {"id": 1, "firstName": "Ana", "cancelTime": "2026-01-15 06:00:00"}

        result = await ingestor.ingest(payload)

        assert result.success
        doc = await store.get("booking_notifications", result.notification_id)
        assert doc.data["action"] == "cancelled"
        assert doc.data["receivedAt"] == clock()
        assert doc.data["rawData"] == payload
        assert doc.data["processed"] is False

    @pytest.mark.asyncio
    async def test_duplicate_deliveries_append_by_default(self, notifications):
        ingestor = BookingIngestor(notifications)
        payload = {"id": 1, "modifiedTime": "2026-01-15 06:00:00"}

        first = await ingestor.ingest(payload)
        second = await ingestor.ingest(payload)

        assert first.notification_id != second.notification_id
        assert len(await notifications.list_recent()) == 2

    @pytest.mark.asyncio
    async def test_dedup_upserts_same_revision(self, notifications):
        ingestor = BookingIngestor(notifications, dedup_enabled=True)
        payload = {"id": 1, "modifiedTime": "2026-01-15 06:00:00"}

        first = await ingestor.ingest(payload)
        second = await ingestor.ingest(payload)
        third = await ingestor.ingest({"id": 1, "modifiedTime": "2026-01-15 07:00:00"})

        assert first.notification_id == second.notification_id
        assert third.notification_id != first.notification_id
        assert len(await notifications.list_recent()) == 2

    @pytest.mark.asyncio
    async def test_non_object_payload_is_stored_raw(self, notifications, store):
        result = await BookingIngestor(notifications).ingest(["unexpected"])

        assert result.success
        doc = await store.get("booking_notifications", result.notification_id)
        assert doc.data["rawData"] == ["unexpected"]
        assert doc.data["guestName"] == "Unknown Guest"

    @pytest.mark.asyncio
    async def test_store_failure_is_reported_not_raised(self):
        repo = MagicMock()
        repo.add = AsyncMock(side_effect=StoreUnavailableError("connection reset", operation="add"))
        ingestor = BookingIngestor(repo)

        result = await ingestor.ingest({"id": 1})

        assert result.success is False
        assert result.error == "connection reset"
