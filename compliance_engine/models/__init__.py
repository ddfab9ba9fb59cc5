"""Data models for the compliance checklist."""

from .checklist import (
    Frequency,
    Shift,
    Weekday,
    SHIFT_ORDER,
    TaskDefinitionCreate,
    DayStatus,
    MonthCompliance,
    SignOffResult,
    ShiftSummary,
)

__all__ = [
    "Frequency",
    "Shift",
    "Weekday",
    "SHIFT_ORDER",
    "TaskDefinitionCreate",
    "DayStatus",
    "MonthCompliance",
    "SignOffResult",
    "ShiftSummary",
]
