"""
Recurrence evaluation, shift bucketing and the auto-tick poller.
"""

from .recurrence import (
    Daily,
    Weekly,
    Monthly,
    parse_recurrence,
    is_due,
    due_tasks,
    next_due_date,
)
from .shifts import bucket_by_shift, current_shift, parse_shift, shift_label, shift_default_time

__all__ = [
    "Daily",
    "Weekly",
    "Monthly",
    "parse_recurrence",
    "is_due",
    "due_tasks",
    "next_due_date",
    "bucket_by_shift",
    "current_shift",
    "parse_shift",
    "shift_label",
    "shift_default_time",
]
