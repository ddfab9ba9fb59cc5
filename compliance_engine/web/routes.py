"""
HTTP routes for checklist authoring, completion tracking and sign-off.
"""

import logging
from datetime import date
from typing import Optional, List, Dict, Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..database.models import CompletionRecordDB, TaskDefinitionDB
from ..database.repositories.task_definitions import TaskDefinitionRepository, get_task_definition_repository
from ..exceptions import (
    AlreadySeededError,
    ComplianceError,
    ConfigurationError,
    NotFoundError,
    ValidationError,
)
from ..integrations.activity_signals import get_activity_signal_source
from ..models.checklist import TaskDefinitionCreate, ShiftSummary, SHIFT_ORDER
from ..scheduler.recurrence import due_tasks
from ..scheduler.shifts import bucket_by_shift, shift_label, shift_default_time
from ..services.auto_tick import AutoTickCorrelator
from ..services.completion_tracker import CompletionTracker
from ..services.sign_off import SignOffAuditor
from ..utils.datetime_utils import get_local_today

logger = logging.getLogger(__name__)

router = APIRouter()


class CompletionCreateRequest(BaseModel):
    """Body for recording a manual completion."""
    actor: str
    day: Optional[date] = None
    reading: Optional[float] = None
    evidence_ref: Optional[str] = None
    notes: Optional[str] = None


class SignOffRequest(BaseModel):
    """Body for a batch sign-off."""
    reviewer: str
    completion_ids: List[int] = Field(default_factory=list)


class DaySignOffRequest(BaseModel):
    reviewer: str


# ============================================================================
# Dependencies
# ============================================================================

def get_definitions() -> TaskDefinitionRepository:
    return get_task_definition_repository()


def get_correlator() -> AutoTickCorrelator:
    return AutoTickCorrelator(get_activity_signal_source())


def get_tracker(correlator: AutoTickCorrelator = Depends(get_correlator)) -> CompletionTracker:
    return CompletionTracker(correlator=correlator)


def get_auditor() -> SignOffAuditor:
    return SignOffAuditor()


# ============================================================================
# Helpers
# ============================================================================

def _http_error(e: ComplianceError) -> HTTPException:
    """Map an engine error onto an HTTP status."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, AlreadySeededError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ConfigurationError):
        logger.error(f"Checklist configuration error: {e}")
    return HTTPException(status_code=500, detail=str(e))


def _task_dict(task: TaskDefinitionDB) -> Dict[str, Any]:
    return {
        "id": task.id,
        "venue_id": task.venue_id,
        "name": task.name,
        "area": task.area,
        "method": task.method,
        "frequency": task.frequency,
        "weekly_day": task.weekly_day,
        "shift": task.shift,
        "scheduled_time": task.scheduled_time,
        "sort_order": task.sort_order,
        "requires_quantitative_reading": task.requires_quantitative_reading,
        "responsible_role": task.responsible_role,
        "auto_tick_source": task.auto_tick_source,
        "is_active": task.is_active,
    }


def _completion_dict(record: CompletionRecordDB) -> Dict[str, Any]:
    return {
        "id": record.id,
        "task_definition_id": record.task_definition_id,
        "venue_id": record.venue_id,
        "completed_by": record.completed_by,
        "completed_at": record.completed_at.isoformat(),
        "numeric_reading": record.numeric_reading,
        "evidence_ref": record.evidence_ref,
        "notes": record.notes,
        "is_auto": record.is_auto,
        "signed_off_by": record.signed_off_by,
        "signed_off_at": record.signed_off_at.isoformat() if record.signed_off_at else None,
    }


# ============================================================================
# Task definitions
# ============================================================================

@router.get("/venues/{venue_id}/tasks")
async def list_tasks(
    venue_id: str,
    include_inactive: bool = False,
    definitions: TaskDefinitionRepository = Depends(get_definitions),
):
    """Active task definitions for a venue (or all with include_inactive)."""
    if include_inactive:
        tasks = await definitions.list_all(venue_id)
    else:
        tasks = await definitions.list_active(venue_id)
    return {"tasks": [_task_dict(t) for t in tasks], "count": len(tasks)}


@router.post("/venues/{venue_id}/tasks", status_code=201)
async def create_task(
    venue_id: str,
    body: TaskDefinitionCreate,
    definitions: TaskDefinitionRepository = Depends(get_definitions),
):
    """Author a single task definition."""
    try:
        task = await definitions.create(venue_id, body)
    except ComplianceError as e:
        raise _http_error(e)
    return {"ok": True, "task": _task_dict(task)}


@router.post("/venues/{venue_id}/tasks/seed", status_code=201)
async def seed_tasks(
    venue_id: str,
    force: bool = False,
    definitions: TaskDefinitionRepository = Depends(get_definitions),
):
    """Seed the default catalog for a venue."""
    try:
        tasks = await definitions.seed_defaults(venue_id, force=force)
    except ComplianceError as e:
        raise _http_error(e)
    return {"ok": True, "created": len(tasks)}


@router.post("/tasks/{task_id}/activate")
async def activate_task(task_id: int, definitions: TaskDefinitionRepository = Depends(get_definitions)):
    try:
        task = await definitions.activate(task_id)
    except ComplianceError as e:
        raise _http_error(e)
    return {"ok": True, "task": _task_dict(task)}


@router.post("/tasks/{task_id}/deactivate")
async def deactivate_task(task_id: int, definitions: TaskDefinitionRepository = Depends(get_definitions)):
    try:
        task = await definitions.deactivate(task_id)
    except ComplianceError as e:
        raise _http_error(e)
    return {"ok": True, "task": _task_dict(task)}


# ============================================================================
# Day / week / month views
# ============================================================================

@router.get("/venues/{venue_id}/days/{day}")
async def get_day(
    venue_id: str,
    day: date,
    definitions: TaskDefinitionRepository = Depends(get_definitions),
    tracker: CompletionTracker = Depends(get_tracker),
):
    """Due tasks bucketed by shift, with done / total and the day's records."""
    try:
        active = await definitions.list_active(venue_id)
        due = due_tasks(active, day)
        buckets = bucket_by_shift(due)
        status = await tracker.day_status(venue_id, day)
        records = await tracker.day_records(venue_id, day)
    except ComplianceError as e:
        raise _http_error(e)

    shifts = [
        ShiftSummary(
            shift=shift,
            label=shift_label(shift),
            default_time=shift_default_time(shift),
            task_ids=[t.id for t in buckets[shift]],
        ).model_dump()
        for shift in SHIFT_ORDER
    ]

    return {
        "venue_id": venue_id,
        "day": day.isoformat(),
        "done": status.done,
        "total": status.total,
        "percent": status.percent,
        "all_done": status.all_done,
        "outstanding_task_ids": status.outstanding_task_ids,
        "auto_ticked_task_ids": status.auto_ticked_task_ids,
        "shifts": shifts,
        "tasks": [_task_dict(t) for t in due],
        "completions": [_completion_dict(r) for r in records],
    }


@router.get("/venues/{venue_id}/weeks/{day}")
async def get_week(venue_id: str, day: date, tracker: CompletionTracker = Depends(get_tracker)):
    """Done / total for each day of the week containing `day`."""
    statuses = await tracker.week_status(venue_id, day)
    return {
        "venue_id": venue_id,
        "days": [
            {"day": s.day.isoformat(), "done": s.done, "total": s.total, "all_done": s.all_done}
            for s in statuses
        ],
    }


@router.get("/venues/{venue_id}/months/{year}/{month}")
async def get_month(
    venue_id: str,
    year: int,
    month: int,
    tracker: CompletionTracker = Depends(get_tracker),
):
    """Completion records and compliance summary for a calendar month."""
    if not 1 <= month <= 12:
        raise HTTPException(status_code=422, detail=f"Invalid month {month}")

    records = await tracker.month_status(venue_id, year, month)
    summary = await tracker.month_compliance(venue_id, year, month)
    return {
        "venue_id": venue_id,
        "year": year,
        "month": month,
        "compliant_days": summary.compliant_days,
        "total_days": summary.total_days,
        "non_compliant_dates": [d.isoformat() for d in summary.non_compliant_dates],
        "completions": [_completion_dict(r) for r in records],
    }


# ============================================================================
# Completions and sign-off
# ============================================================================

@router.post("/tasks/{task_id}/completions", status_code=201)
async def record_completion(
    task_id: int,
    body: CompletionCreateRequest,
    tracker: CompletionTracker = Depends(get_tracker),
):
    """Record a manual completion (defaults to today)."""
    try:
        record = await tracker.record_completion(
            task_id,
            body.day or get_local_today(),
            body.actor,
            reading=body.reading,
            evidence_ref=body.evidence_ref,
            notes=body.notes,
        )
    except ComplianceError as e:
        raise _http_error(e)
    return {"ok": True, "completion": _completion_dict(record)}


@router.post("/completions/sign-off")
async def sign_off(body: SignOffRequest, auditor: SignOffAuditor = Depends(get_auditor)):
    """Sign off a batch of completion records."""
    try:
        result = await auditor.sign_off(body.completion_ids, body.reviewer)
    except ComplianceError as e:
        raise _http_error(e)
    return result.model_dump(mode="json")


@router.post("/venues/{venue_id}/days/{day}/sign-off")
async def sign_off_day(
    venue_id: str,
    day: date,
    body: DaySignOffRequest,
    auditor: SignOffAuditor = Depends(get_auditor),
):
    """Sign off every unsigned record of a venue-day."""
    try:
        result = await auditor.sign_off_day(venue_id, day, body.reviewer)
    except ComplianceError as e:
        raise _http_error(e)
    return result.model_dump(mode="json")
