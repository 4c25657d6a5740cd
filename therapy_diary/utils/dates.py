"""
Local-calendar helpers.

Timestamps are stored in UTC; "a day" always means a calendar day in the
configured timezone.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union

import pytz

from common.database import ensure_utc
from common.utils.exceptions import ValidationException

DateLike = Union[date, datetime, str]


def get_tz(tz_name: str):
    """Resolve a timezone name, rejecting unknown names."""
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise ValidationException(message=f"Unknown timezone: {tz_name}", code="INVALID_TIMEZONE")


def parse_date(value: DateLike) -> date:
    """
    Parse a calendar date.

    Accepts date objects, datetimes (their own calendar date) and
    "YYYY-MM-DD" or ISO-8601 strings.

    Raises:
        ValidationException: Malformed date string
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        raise ValidationException(message=f"Invalid date: {value}", code="INVALID_DATE")


def parse_timestamp(value: Union[datetime, str], tz_name: str = "UTC") -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Values without an offset are wall-clock times in tz_name.

    Raises:
        ValidationException: Malformed timestamp string
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationException(message=f"Invalid timestamp: {value}", code="INVALID_TIMESTAMP")
    if value.tzinfo is None:
        value = get_tz(tz_name).localize(value)
    return ensure_utc(value)


def local_date(moment: datetime, tz_name: str) -> date:
    """Calendar date of an instant in the given timezone."""
    return ensure_utc(moment).astimezone(get_tz(tz_name)).date()


def day_bounds(day: DateLike, tz_name: str) -> Tuple[datetime, datetime]:
    """
    UTC bounds of a local calendar day.

    Returns:
        (start, end) where start is 00:00:00.000 and end is 23:59:59.999
        local time, both as aware UTC datetimes
    """
    if isinstance(day, datetime):
        day = local_date(day, tz_name)
    else:
        day = parse_date(day)

    tz = get_tz(tz_name)
    start_local = tz.localize(datetime.combine(day, time.min))
    end_local = tz.localize(datetime.combine(day, time(23, 59, 59, 999000)))
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def start_of_day(day: DateLike, tz_name: str) -> datetime:
    """UTC instant of local midnight for a day."""
    return day_bounds(day, tz_name)[0]


def days_between(earlier: datetime, later: datetime, tz_name: str) -> int:
    """Whole local calendar days from one instant to another."""
    return (local_date(later, tz_name) - local_date(earlier, tz_name)).days


def time_of_day_for(moment: datetime, tz_name: str) -> str:
    """
    Bucket an instant into Morning/Afternoon/Evening/Night by local hour.

    05-11 Morning, 12-16 Afternoon, 17-20 Evening, otherwise Night.
    """
    hour = ensure_utc(moment).astimezone(get_tz(tz_name)).hour
    if 5 <= hour < 12:
        return "Morning"
    if 12 <= hour < 17:
        return "Afternoon"
    if 17 <= hour < 21:
        return "Evening"
    return "Night"


def lookback_range(days: int, tz_name: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    UTC bounds covering the last `days` local days through the end of today.
    """
    now = now or datetime.now(timezone.utc)
    today = local_date(now, tz_name)
    start, _ = day_bounds(today - timedelta(days=days), tz_name)
    _, end = day_bounds(today, tz_name)
    return start, end
