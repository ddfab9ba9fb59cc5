"""
Services for checklist business logic.
"""

from .auto_tick import AutoTickCorrelator, AUTO_COMPLETION_NOTE
from .completion_tracker import CompletionTracker, build_day_status
from .sign_off import SignOffAuditor

__all__ = [
    "AutoTickCorrelator",
    "AUTO_COMPLETION_NOTE",
    "CompletionTracker",
    "build_day_status",
    "SignOffAuditor",
]
