"""
Recurrence evaluation for checklist tasks.

Decides whether a task definition is due on a calendar date. Frequencies are
parsed into a closed set of recurrence variants:

- Daily            -> due every day
- Weekly(weekday)  -> due on one weekday
- Monthly          -> due on the 1st of the month

Weekdays are numbered Sunday=0 .. Saturday=6 inside this module; Python's
Monday=0 numbering is converted in weekday_index().
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, List, Optional, Union

from ..exceptions import ConfigurationError
from .shifts import parse_shift

logger = logging.getLogger(__name__)


WEEKDAYS = {
    "sunday": 0, "monday": 1, "tuesday": 2, "wednesday": 3,
    "thursday": 4, "friday": 5, "saturday": 6,
}


@dataclass(frozen=True)
class Daily:
    pass


@dataclass(frozen=True)
class Weekly:
    weekday: int  # Sunday=0 .. Saturday=6


@dataclass(frozen=True)
class Monthly:
    day_of_month: int = 1


Recurrence = Union[Daily, Weekly, Monthly]


def _raw(value: Any) -> Optional[str]:
    """Normalize enum members and strings to a lowercase string."""
    if value is None:
        return None
    value = getattr(value, "value", value)
    return str(value).strip().lower()


def weekday_index(day: date) -> int:
    """Sunday=0 .. Saturday=6 index of a date."""
    return (day.weekday() + 1) % 7


def parse_recurrence(frequency: Any, weekly_day: Any = None) -> Recurrence:
    """
    Parse a stored frequency and weekday into a recurrence variant.

    Raises:
        ConfigurationError: unknown frequency, weekly task without a valid
            weekday, or a weekday set on a non-weekly task.
    """
    freq = _raw(frequency)
    day_name = _raw(weekly_day) or None

    if freq == "weekly":
        if day_name is None:
            raise ConfigurationError("weekly task is missing weekly_day")
        if day_name not in WEEKDAYS:
            raise ConfigurationError(f"unknown weekly_day {weekly_day!r}")
        return Weekly(weekday=WEEKDAYS[day_name])

    if day_name is not None:
        raise ConfigurationError(f"weekly_day set on a {freq!r} task")

    if freq == "daily":
        return Daily()
    if freq == "monthly":
        return Monthly()

    raise ConfigurationError(f"unknown frequency {frequency!r}")


def recurrence_of(task: Any) -> Recurrence:
    """Recurrence variant of a task definition (ORM row or authoring model)."""
    return parse_recurrence(task.frequency, getattr(task, "weekly_day", None))


def matches(recurrence: Recurrence, day: date) -> bool:
    """Check a recurrence variant against a date."""
    if isinstance(recurrence, Daily):
        return True
    if isinstance(recurrence, Weekly):
        return weekday_index(day) == recurrence.weekday
    if isinstance(recurrence, Monthly):
        return day.day == recurrence.day_of_month
    raise ConfigurationError(f"unsupported recurrence {recurrence!r}")


def is_due(task: Any, day: date) -> bool:
    """
    Check if a task is due on a date.

    Inactive definitions are never due. Raises ConfigurationError for a
    malformed definition, even when inactive, so bad rows surface early.
    """
    recurrence = recurrence_of(task)
    if not getattr(task, "is_active", True):
        return False
    return matches(recurrence, day)


def due_tasks(tasks: Iterable[Any], day: date) -> List[Any]:
    """
    Filter definitions to those due on a date.

    A malformed definition (bad recurrence or unknown shift) is skipped and
    logged so one bad row does not hide the rest of the day's checklist.
    """
    due = []
    for task in tasks:
        try:
            if is_due(task, day):
                if hasattr(task, "shift"):
                    parse_shift(task.shift)
                due.append(task)
        except ConfigurationError as e:
            logger.error(
                f"Skipping malformed task definition {getattr(task, 'id', '?')} "
                f"({getattr(task, 'name', '')}): {e}"
            )
    return due


def next_due_date(task: Any, after: date) -> Optional[date]:
    """
    First date strictly after `after` on which the task is due.

    Returns None for inactive tasks. A monthly task created mid-month waits
    for the next 1st.
    """
    recurrence = recurrence_of(task)
    if not getattr(task, "is_active", True):
        return None

    if isinstance(recurrence, Daily):
        return after + timedelta(days=1)

    if isinstance(recurrence, Weekly):
        days_ahead = (recurrence.weekday - weekday_index(after)) % 7
        if days_ahead == 0:
            days_ahead = 7
        return after + timedelta(days=days_ahead)

    if after.month == 12:
        return date(after.year + 1, 1, recurrence.day_of_month)
    return date(after.year, after.month + 1, recurrence.day_of_month)
