"""Shared date/time helpers"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def parse_wall_clock(date_str: str, time_str: str, tz: Optional[str] = None) -> datetime:
    """
    Parse "YYYY-MM-DD" + "HH:MM" as a wall-clock timestamp.

    With tz the timestamp is placed in that IANA zone, otherwise in the
    host's local zone. The result is always timezone-aware.

    Raises:
        ValueError: If the date or time is malformed
    """
    naive = datetime.fromisoformat(f"{date_str}T{time_str}:00")
    if tz:
        return naive.replace(tzinfo=ZoneInfo(tz))
    return naive.astimezone()


def to_iso_instant(value: datetime) -> str:
    """Format an aware datetime as a UTC ISO-8601 instant, e.g. 2024-07-01T16:30:00.000Z"""
    utc_value = value.astimezone(timezone.utc)
    return utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def add_minutes(date_str: str, time_str: str, minutes: int, tz: Optional[str] = None) -> str:
    """
    Add minutes to a wall-clock date/time and return the ISO-8601 instant.

    Example:
        add_minutes("2024-07-01", "12:00", 25, "America/New_York")
        -> "2024-07-01T16:25:00.000Z"
    """
    # Elapsed-time arithmetic: add in UTC so DST transitions don't shift the result
    start = parse_wall_clock(date_str, time_str, tz).astimezone(timezone.utc)
    return to_iso_instant(start + timedelta(minutes=minutes))


def utc_now_iso() -> str:
    """Current instant as a UTC ISO-8601 string"""
    return to_iso_instant(datetime.now(timezone.utc))
