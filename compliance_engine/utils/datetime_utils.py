"""
Centralized datetime and timezone utilities.

Completion timestamps are stored as naive datetimes in the venue's local
timezone, so a "calendar day" is simply [00:00, next day 00:00) in storage.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple
import pytz

from config import settings


def get_local_tz() -> pytz.BaseTzInfo:
    """Get the configured local timezone."""
    return pytz.timezone(settings.timezone)


def get_local_now() -> datetime:
    """Get current time in local timezone (naive)."""
    local_tz = get_local_tz()
    return datetime.now(local_tz).replace(tzinfo=None)


def get_local_today() -> date:
    """Get today's calendar date in the local timezone."""
    return get_local_now().date()


def to_naive_local(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert any datetime to naive local time for database storage.

    Timezone-aware datetimes are converted to local time and stripped;
    naive datetimes are assumed to already be local.
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        local_tz = get_local_tz()
        return dt.astimezone(local_tz).replace(tzinfo=None)

    return dt


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Half-open [start, end) range covering one calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Half-open [start, end) range covering one calendar month."""
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def week_start(day: date) -> date:
    """Sunday on or before the given date."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def stamp_on_day(day: date, now: Optional[datetime] = None) -> datetime:
    """
    Timestamp for an event recorded against `day`.

    Today's events get the current time; back-dated events keep the current
    time-of-day on the requested date so they fall inside that day's range.
    """
    now = now or get_local_now()
    if now.date() == day:
        return now
    return datetime.combine(day, now.time())
