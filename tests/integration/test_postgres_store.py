"""Integration tests for PostgresDocumentStore against a real database."""

from datetime import datetime, timedelta, timezone

import pytest

from hkapi.storage import SERVER_TIMESTAMP, Filter

pytestmark = [pytest.mark.integration, pytest.mark.postgres]

BASE = datetime(2026, 1, 15, 6, 30, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_set_get_round_trip_with_datetimes(pg_store):
    data = {"code": "123456", "expiresAt": BASE, "attempts": 0, "userId": None}
    await pg_store.set("otp_codes", "a@example.com", data)

    doc = await pg_store.get("otp_codes", "a@example.com")
    assert doc.data == data


@pytest.mark.asyncio
async def test_server_timestamp_resolved(pg_store):
    doc_id = await pg_store.add("hk_users", {"email": "a@example.com", "createdAt": SERVER_TIMESTAMP})

    doc = await pg_store.get("hk_users", doc_id)
    assert isinstance(doc.data["createdAt"], datetime)


@pytest.mark.asyncio
async def test_compare_and_set(pg_store):
    await pg_store.set("otp_codes", "a@example.com", {"code": "111111", "attempts": 1})

    assert not await pg_store.update(
        "otp_codes", "a@example.com", {"attempts": 2}, expected={"code": "111111", "attempts": 0}
    )
    assert await pg_store.update(
        "otp_codes", "a@example.com", {"attempts": 2}, expected={"code": "111111", "attempts": 1}
    )
    assert not await pg_store.delete("otp_codes", "a@example.com", expected={"attempts": 1})
    assert await pg_store.delete("otp_codes", "a@example.com", expected={"attempts": 2})


@pytest.mark.asyncio
async def test_time_range_query_and_batch_delete(pg_store):
    for minutes in range(5):
        await pg_store.set(
            "booking_notifications", f"n{minutes}", {"receivedAt": BASE + timedelta(minutes=minutes)}
        )

    newer = await pg_store.query(
        "booking_notifications",
        [Filter("receivedAt", ">", BASE + timedelta(minutes=2))],
        order_by="receivedAt",
        descending=True,
    )
    assert [d.id for d in newer] == ["n4", "n3"]

    older = await pg_store.query(
        "booking_notifications", [Filter("receivedAt", "<", BASE + timedelta(minutes=2))]
    )
    assert sorted(d.id for d in older) == ["n0", "n1"]

    assert await pg_store.delete_many("booking_notifications", ["n0", "n1", "missing"]) == 2
    assert await pg_store.list_ids("booking_notifications") == ["n2", "n3", "n4"]


@pytest.mark.asyncio
async def test_equality_filter(pg_store):
    await pg_store.add("hk_users", {"email": "a@example.com", "role": "staff"})
    await pg_store.add("hk_users", {"email": "b@example.com", "role": "admin"})

    docs = await pg_store.query("hk_users", [Filter("email", "==", "b@example.com")])
    assert [d.data["role"] for d in docs] == ["admin"]


@pytest.mark.asyncio
async def test_date_shaped_payload_is_stored_verbatim(pg_store):
    raw = {"id": 1, "meta": {"$date": "not-a-date"}, "seen": {"$date": "2024-01-01"}}
    await pg_store.set(
        "booking_notifications", "n0", {"receivedAt": BASE - timedelta(days=2), "rawData": raw}
    )

    docs = await pg_store.query("booking_notifications", order_by="receivedAt", descending=True)
    assert docs[0].data["rawData"] == raw

    old = await pg_store.query_ids("booking_notifications", [Filter("receivedAt", "<", BASE)])
    assert old == ["n0"]
