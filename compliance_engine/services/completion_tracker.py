"""
Completion tracking for checklist tasks.

Records manual completions and derives day / week / month status from the
completion log. "Is this task done today" is never stored: it is computed
as "at least one record exists for (task, day)", or the task's activity
signal has auto-ticked it.
"""

import logging
from datetime import date, timedelta
from typing import Optional, Set, List, Iterable, Any

from ..database.models import CompletionRecordDB, TaskDefinitionDB
from ..database.repositories.task_definitions import TaskDefinitionRepository, get_task_definition_repository
from ..database.repositories.completions import CompletionRepository, get_completion_repository
from ..exceptions import NotFoundError, ValidationError
from ..models.checklist import DayStatus, MonthCompliance
from ..scheduler.recurrence import due_tasks
from ..utils.datetime_utils import (
    day_bounds,
    days_in_month,
    get_local_today,
    stamp_on_day,
    week_start,
)
from .auto_tick import AutoTickCorrelator

logger = logging.getLogger(__name__)


def build_day_status(
    venue_id: str,
    day: date,
    definitions: Iterable[Any],
    completed_ids: Set[int],
    auto_ticked: Optional[Set[str]] = None,
) -> DayStatus:
    """Combine due tasks, completion existence and auto-tick sources."""
    auto_ticked = auto_ticked or set()
    status = DayStatus(venue_id=venue_id, day=day)

    for task in due_tasks(definitions, day):
        status.total += 1
        if task.id in completed_ids:
            status.done += 1
            status.done_task_ids.append(task.id)
        elif task.auto_tick_source and task.auto_tick_source in auto_ticked:
            status.done += 1
            status.done_task_ids.append(task.id)
            status.auto_ticked_task_ids.append(task.id)
        else:
            status.outstanding_task_ids.append(task.id)

    return status


class CompletionTracker:
    """Records completions and answers "what is done" questions."""

    def __init__(
        self,
        definitions: Optional[TaskDefinitionRepository] = None,
        completions: Optional[CompletionRepository] = None,
        correlator: Optional[AutoTickCorrelator] = None,
    ):
        self.definitions = definitions or get_task_definition_repository()
        self.completions = completions or get_completion_repository()
        self.correlator = correlator

    async def record_completion(
        self,
        task_id: int,
        day: date,
        actor: str,
        reading: Optional[float] = None,
        evidence_ref: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> CompletionRecordDB:
        """
        Append a manual completion for a task on a day.

        The task may be inactive (retired the same day it was done).

        Raises:
            NotFoundError: unknown task
            ValidationError: missing actor, or missing reading on a task
                that requires one
        """
        if not actor or not actor.strip():
            raise ValidationError("actor required")

        task = await self.definitions.get_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Task definition {task_id} not found")

        if task.requires_quantitative_reading and reading is None:
            raise ValidationError("reading required")

        record = await self.completions.add(
            task_definition_id=task.id,
            venue_id=task.venue_id,
            completed_by=actor.strip(),
            completed_at=stamp_on_day(day),
            numeric_reading=reading,
            evidence_ref=evidence_ref,
            notes=notes,
        )
        logger.info(f"Task {task.id} '{task.name}' completed by {record.completed_by} for {day}")
        return record

    async def _resolve(self, venue_id: str, day: date, auto_ticked: Optional[Set[str]]) -> Set[str]:
        if auto_ticked is not None:
            return set(auto_ticked)
        if self.correlator is None:
            return set()
        return await self.correlator.resolve_auto_ticks(venue_id, day)

    async def day_status(
        self,
        venue_id: str,
        day: date,
        auto_ticked: Optional[Set[str]] = None,
    ) -> DayStatus:
        """
        Done / total for a venue-day.

        auto_ticked is the set of satisfied activity keys; when omitted it
        is resolved through the correlator (if one is attached).
        """
        definitions = await self.definitions.list_active(venue_id)
        completed_ids = await self.completions.completed_task_ids(venue_id, day)
        sources = await self._resolve(venue_id, day, auto_ticked)
        return build_day_status(venue_id, day, definitions, completed_ids, sources)

    async def week_status(self, venue_id: str, day: date) -> List[DayStatus]:
        """
        Day statuses for the Sunday-to-Saturday week containing `day`.

        Each day resolves its own auto-ticks, so a day here matches
        day_status for the same date.
        """
        start = week_start(day)
        range_start, _ = day_bounds(start)
        _, range_end = day_bounds(start + timedelta(days=6))

        definitions = await self.definitions.list_active(venue_id)
        records = await self.completions.list_between(venue_id, range_start, range_end)

        statuses = []
        for offset in range(7):
            current = start + timedelta(days=offset)
            completed_ids = {r.task_definition_id for r in records if r.completed_at.date() == current}
            sources = await self._resolve(venue_id, current, None)
            statuses.append(build_day_status(venue_id, current, definitions, completed_ids, sources))
        return statuses

    async def day_records(self, venue_id: str, day: date) -> List[CompletionRecordDB]:
        """Every completion record of a venue-day, oldest first."""
        return await self.completions.list_for_day(venue_id, day)

    async def month_status(self, venue_id: str, year: int, month: int) -> List[CompletionRecordDB]:
        """Every completion record in a calendar month."""
        return await self.completions.list_for_month(venue_id, year, month)

    async def month_compliance(
        self,
        venue_id: str,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> MonthCompliance:
        """
        Count days in a month on which every due task is done.

        For the current month only days up to today are counted; future
        months count nothing. A day with no due tasks is compliant. A task
        missing a record still counts as done when its activity signal was
        satisfied that day; signals are only queried for days the records
        alone leave short.

        Past days are judged against the definitions active now. Retirement
        is not dated, so a task deactivated mid-month drops out of its
        earlier due days too.
        """
        today = today or get_local_today()
        summary = MonthCompliance(venue_id=venue_id, year=year, month=month)

        last_day = days_in_month(year, month)
        if (year, month) == (today.year, today.month):
            last_day = today.day
        elif (year, month) > (today.year, today.month):
            return summary

        definitions: List[TaskDefinitionDB] = await self.definitions.list_active(venue_id)
        records = await self.completions.list_for_month(venue_id, year, month)

        done_by_day = {}
        for record in records:
            done_by_day.setdefault(record.completed_at.day, set()).add(record.task_definition_id)

        for day_number in range(1, last_day + 1):
            current = date(year, month, day_number)
            summary.total_days += 1
            due = due_tasks(definitions, current)
            done = done_by_day.get(day_number, set())
            compliant = all(task.id in done for task in due)
            if not compliant and any(task.auto_tick_source for task in due):
                sources = await self._resolve(venue_id, current, None)
                compliant = all(
                    task.id in done or (task.auto_tick_source and task.auto_tick_source in sources)
                    for task in due
                )
            if compliant:
                summary.compliant_days += 1
            else:
                summary.non_compliant_dates.append(current)

        return summary

    async def pending_sign_off(self, venue_id: str, day: date) -> List[CompletionRecordDB]:
        """A day's completion records still awaiting sign-off."""
        return await self.completions.list_unsigned_for_day(venue_id, day)
