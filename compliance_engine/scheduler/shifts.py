"""
Shift bucketing for due tasks.

Groups due tasks into opening / midday / closing buckets. Within a bucket,
timed tasks come first ordered by scheduled time, then untimed tasks; ties
break on sort_order.
"""

import logging
from typing import Any, Dict, Iterable, List

from ..exceptions import ConfigurationError
from ..models.checklist import Shift, SHIFT_ORDER

logger = logging.getLogger(__name__)


SHIFT_LABELS = {
    Shift.OPENING: "Opening",
    Shift.MIDDAY: "Midday",
    Shift.CLOSING: "Closing",
}

# Reminder anchor for a bucket when its tasks carry no explicit time
SHIFT_DEFAULT_TIMES = {
    Shift.OPENING: "08:00",
    Shift.MIDDAY: "11:30",
    Shift.CLOSING: "21:30",
}


def parse_shift(value: Any) -> Shift:
    """
    Parse a stored shift value.

    Raises:
        ConfigurationError: value is not opening, midday or closing
    """
    try:
        return Shift(getattr(value, "value", value))
    except ValueError:
        raise ConfigurationError(f"unknown shift {value!r}") from None


def _order_key(task: Any) -> tuple:
    scheduled = task.scheduled_time or None
    # "HH:MM" strings sort chronologically
    return (scheduled is None, scheduled or "", task.sort_order or 0)


def bucket_by_shift(due: Iterable[Any]) -> Dict[Shift, List[Any]]:
    """
    Group tasks by shift; every shift is present, possibly empty.

    A task with an unknown shift is logged and left out.
    """
    buckets: Dict[Shift, List[Any]] = {shift: [] for shift in SHIFT_ORDER}
    for task in due:
        try:
            shift = parse_shift(task.shift)
        except ConfigurationError as e:
            logger.error(f"Skipping task definition {getattr(task, 'id', '?')} in shift view: {e}")
            continue
        buckets[shift].append(task)
    for shift in SHIFT_ORDER:
        buckets[shift].sort(key=_order_key)
    return buckets


def shift_label(shift: Shift) -> str:
    return SHIFT_LABELS[Shift(shift)]


def shift_default_time(shift: Shift) -> str:
    return SHIFT_DEFAULT_TIMES[Shift(shift)]


def current_shift(hour: int) -> Shift:
    """Shift a checklist screen opens on at a given local hour."""
    if hour < 14:
        return Shift.OPENING
    if hour < 18:
        return Shift.MIDDAY
    return Shift.CLOSING
