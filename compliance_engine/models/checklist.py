"""Checklist data models: vocabularies, authoring input and computed status."""

from datetime import date, datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, model_validator
import re


class Frequency(str, Enum):
    """How often a task recurs."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Shift(str, Enum):
    """Time-of-day bucket a task belongs to."""
    OPENING = "opening"
    MIDDAY = "midday"
    CLOSING = "closing"


class Weekday(str, Enum):
    """Weekday symbols as stored on task definitions."""
    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


SHIFT_ORDER = (Shift.OPENING, Shift.MIDDAY, Shift.CLOSING)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class TaskDefinitionCreate(BaseModel):
    """Input for authoring a single task definition."""

    name: str = Field(min_length=1, max_length=200)
    area: str = ""
    frequency: Frequency = Frequency.DAILY
    weekly_day: Optional[Weekday] = None
    shift: Shift = Shift.OPENING
    scheduled_time: Optional[str] = None  # "HH:MM", 24h
    method: Optional[str] = None
    requires_quantitative_reading: bool = False
    responsible_role: str = "any"
    auto_tick_source: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True

    @field_validator("scheduled_time")
    @classmethod
    def _check_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        if not _TIME_RE.match(value):
            raise ValueError(f"scheduled_time must be HH:MM, got {value!r}")
        return value

    @model_validator(mode="after")
    def _check_weekly_day(self) -> "TaskDefinitionCreate":
        if self.frequency == Frequency.WEEKLY and self.weekly_day is None:
            raise ValueError("weekly_day is required for weekly tasks")
        if self.frequency != Frequency.WEEKLY and self.weekly_day is not None:
            raise ValueError("weekly_day is only allowed on weekly tasks")
        return self


class DayStatus(BaseModel):
    """Derived completion state of one venue-day."""
    venue_id: str
    day: date
    done: int = 0
    total: int = 0
    done_task_ids: List[int] = Field(default_factory=list)
    outstanding_task_ids: List[int] = Field(default_factory=list)
    # Satisfied only through an activity signal (no completion record yet)
    auto_ticked_task_ids: List[int] = Field(default_factory=list)

    @property
    def all_done(self) -> bool:
        return self.total > 0 and self.done == self.total

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return round(self.done / self.total * 100, 1)


class MonthCompliance(BaseModel):
    """Count of fully compliant days in a calendar month."""
    venue_id: str
    year: int
    month: int
    compliant_days: int = 0
    total_days: int = 0
    non_compliant_dates: List[date] = Field(default_factory=list)


class SignOffResult(BaseModel):
    """Outcome of a batch sign-off."""
    reviewer: str
    signed_off_at: Optional[datetime] = None
    signed: List[int] = Field(default_factory=list)
    already_signed: List[int] = Field(default_factory=list)
    missing: List[int] = Field(default_factory=list)


class ShiftSummary(BaseModel):
    """Per-shift view used by the day endpoint."""
    shift: Shift
    label: str
    default_time: str
    task_ids: List[int] = Field(default_factory=list)

    model_config = {"use_enum_values": True}
