"""
External activity-signal sources.
"""

from .activity_signals import (
    ActivitySignalSource,
    StaticActivitySignalSource,
    HttpActivitySignalSource,
    get_activity_signal_source,
)

__all__ = [
    "ActivitySignalSource",
    "StaticActivitySignalSource",
    "HttpActivitySignalSource",
    "get_activity_signal_source",
]
