"""Utility modules for the compliance engine."""

from .datetime_utils import (
    get_local_tz,
    get_local_now,
    get_local_today,
    to_naive_local,
    day_bounds,
    month_bounds,
)
from .retry import retry_with_backoff, RetryExhausted

__all__ = [
    "get_local_tz",
    "get_local_now",
    "get_local_today",
    "to_naive_local",
    "day_bounds",
    "month_bounds",
    "retry_with_backoff",
    "RetryExhausted",
]
