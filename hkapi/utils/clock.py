"""Time helpers shared by services and routes."""

from datetime import date, datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def local_now(tz_name: str, clock: Clock = utc_now) -> datetime:
    """Current time in the given IANA zone."""
    return clock().astimezone(ZoneInfo(tz_name))


def local_today(tz_name: str, clock: Clock = utc_now) -> date:
    """Current calendar date in the given IANA zone."""
    return local_now(tz_name, clock).date()


def format_local_timestamp(moment: datetime) -> str:
    """Format as M/D/YYYY, h:mm:ss AM/PM (e.g. 1/5/2026, 3:04:05 PM)."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return (
        f"{moment.month}/{moment.day}/{moment.year}, "
        f"{hour}:{moment.minute:02d}:{moment.second:02d} {suffix}"
    )
