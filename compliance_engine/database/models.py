"""
SQLAlchemy models for the checklist datastore.

Schema includes:
- Task definitions (recurring compliance task templates per venue)
- Completion records (append-only log, extended only by sign-off)
"""

from datetime import date, datetime
from typing import Optional, List
from sqlalchemy import (
    String,
    Text,
    Integer,
    Boolean,
    DateTime,
    Date,
    Float,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ==================== TASK DEFINITIONS ====================

class TaskDefinitionDB(Base):
    """Recurring compliance task template for a venue."""
    __tablename__ = "task_definitions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    venue_id: Mapped[str] = mapped_column(String(100), nullable=False)

    # What and where
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    area: Mapped[str] = mapped_column(String(100), default="")
    method: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Schedule
    frequency: Mapped[str] = mapped_column(String(20), nullable=False)  # daily, weekly, monthly
    weekly_day: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # sunday..saturday
    shift: Mapped[str] = mapped_column(String(20), nullable=False)  # opening, midday, closing
    scheduled_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)  # HH:MM
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    # Rules
    requires_quantitative_reading: Mapped[bool] = mapped_column(Boolean, default=False)
    responsible_role: Mapped[str] = mapped_column(String(50), default="any")
    auto_tick_source: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Control
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    catalog_version: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    completions: Mapped[List["CompletionRecordDB"]] = relationship(
        "CompletionRecordDB", back_populates="task_definition"
    )

    __table_args__ = (
        Index("idx_task_def_venue_active_order", "venue_id", "is_active", "sort_order"),
    )

    def __repr__(self) -> str:
        return f"<TaskDefinitionDB id={self.id} venue={self.venue_id} name={self.name!r}>"


# ==================== COMPLETIONS ====================

class CompletionRecordDB(Base):
    """One instance of a task being satisfied on a calendar day."""
    __tablename__ = "completion_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_definition_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("task_definitions.id"), nullable=False
    )
    venue_id: Mapped[str] = mapped_column(String(100), nullable=False)

    # Who and when
    completed_by: Mapped[str] = mapped_column(String(100), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Evidence
    numeric_reading: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # e.g. sanitiser ppm
    evidence_ref: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_auto: Mapped[bool] = mapped_column(Boolean, default=False)
    # Set only on auto records; unique per task so repeated polls insert once
    auto_tick_day: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Sign-off (set once, never cleared)
    signed_off_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    signed_off_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    task_definition: Mapped["TaskDefinitionDB"] = relationship(
        "TaskDefinitionDB", back_populates="completions"
    )

    __table_args__ = (
        Index("idx_completion_venue_task_time", "venue_id", "task_definition_id", "completed_at"),
        Index("idx_completion_venue_time", "venue_id", "completed_at"),
        UniqueConstraint("task_definition_id", "auto_tick_day", name="uq_completion_auto_tick_day"),
    )

    @property
    def is_signed_off(self) -> bool:
        return self.signed_off_at is not None

    def __repr__(self) -> str:
        return (
            f"<CompletionRecordDB id={self.id} task={self.task_definition_id} "
            f"at={self.completed_at} auto={self.is_auto}>"
        )
