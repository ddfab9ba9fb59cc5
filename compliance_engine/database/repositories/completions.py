"""
Repository for completion records.

Completion records form an append-only log per venue-day. Rows are only
ever inserted, or extended once with sign-off fields; nothing is updated
in place or deleted.
"""

import logging
from datetime import date, datetime
from typing import Optional, List, Set, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from ...utils.datetime_utils import day_bounds, month_bounds
from ..connection import Database, get_database
from ..models import CompletionRecordDB

logger = logging.getLogger(__name__)


class CompletionRepository:
    """Repository for completion record operations."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_database()

    async def add(
        self,
        task_definition_id: int,
        venue_id: str,
        completed_by: str,
        completed_at: datetime,
        numeric_reading: Optional[float] = None,
        evidence_ref: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> CompletionRecordDB:
        """Append a manual completion record."""
        async with self.db.session() as session:
            record = CompletionRecordDB(
                task_definition_id=task_definition_id,
                venue_id=venue_id,
                completed_by=completed_by,
                completed_at=completed_at,
                numeric_reading=numeric_reading,
                evidence_ref=evidence_ref,
                notes=notes,
                is_auto=False,
            )
            session.add(record)
            await session.flush()

            logger.debug(
                f"Completion {record.id}: task {task_definition_id} by {completed_by} at {completed_at}"
            )
            return record

    async def find_auto(self, task_definition_id: int, day: date) -> Optional[CompletionRecordDB]:
        """The synthetic record for (task, day), if one exists."""
        async with self.db.session() as session:
            result = await session.execute(
                select(CompletionRecordDB).where(
                    CompletionRecordDB.task_definition_id == task_definition_id,
                    CompletionRecordDB.auto_tick_day == day,
                    CompletionRecordDB.is_auto.is_(True),
                )
            )
            return result.scalars().first()

    async def add_auto_if_absent(
        self,
        task_definition_id: int,
        venue_id: str,
        day: date,
        completed_by: str,
        completed_at: datetime,
        notes: Optional[str] = None,
    ) -> Optional[CompletionRecordDB]:
        """
        Insert the synthetic record for (task, day) unless one exists.

        Returns the new record, or None when an auto record was already
        present (including one inserted concurrently by another poller).
        """
        if await self.find_auto(task_definition_id, day) is not None:
            return None

        try:
            async with self.db.session() as session:
                record = CompletionRecordDB(
                    task_definition_id=task_definition_id,
                    venue_id=venue_id,
                    completed_by=completed_by,
                    completed_at=completed_at,
                    notes=notes,
                    is_auto=True,
                    auto_tick_day=day,
                )
                session.add(record)
                await session.flush()
        except IntegrityError:
            logger.debug(f"Auto completion for task {task_definition_id} on {day} already written")
            return None

        logger.info(f"Auto completion {record.id}: task {task_definition_id} on {day}")
        return record

    async def list_between(self, venue_id: str, start: datetime, end: datetime) -> List[CompletionRecordDB]:
        """Records with start <= completed_at < end, oldest first."""
        async with self.db.session() as session:
            result = await session.execute(
                select(CompletionRecordDB)
                .where(
                    CompletionRecordDB.venue_id == venue_id,
                    CompletionRecordDB.completed_at >= start,
                    CompletionRecordDB.completed_at < end,
                )
                .order_by(CompletionRecordDB.completed_at, CompletionRecordDB.id)
            )
            return list(result.scalars().all())

    async def list_for_day(self, venue_id: str, day: date) -> List[CompletionRecordDB]:
        start, end = day_bounds(day)
        return await self.list_between(venue_id, start, end)

    async def list_for_month(self, venue_id: str, year: int, month: int) -> List[CompletionRecordDB]:
        start, end = month_bounds(year, month)
        return await self.list_between(venue_id, start, end)

    async def completed_task_ids(self, venue_id: str, day: date) -> Set[int]:
        """Tasks with at least one record on the day."""
        start, end = day_bounds(day)
        async with self.db.session() as session:
            result = await session.execute(
                select(CompletionRecordDB.task_definition_id)
                .where(
                    CompletionRecordDB.venue_id == venue_id,
                    CompletionRecordDB.completed_at >= start,
                    CompletionRecordDB.completed_at < end,
                )
                .distinct()
            )
            return set(result.scalars().all())

    async def list_unsigned_for_day(self, venue_id: str, day: date) -> List[CompletionRecordDB]:
        start, end = day_bounds(day)
        async with self.db.session() as session:
            result = await session.execute(
                select(CompletionRecordDB)
                .where(
                    CompletionRecordDB.venue_id == venue_id,
                    CompletionRecordDB.completed_at >= start,
                    CompletionRecordDB.completed_at < end,
                    CompletionRecordDB.signed_off_at.is_(None),
                )
                .order_by(CompletionRecordDB.completed_at, CompletionRecordDB.id)
            )
            return list(result.scalars().all())

    async def sign_off(
        self,
        ids: List[int],
        reviewer: str,
        signed_off_at: datetime,
    ) -> Tuple[List[int], List[int], List[int]]:
        """
        Stamp sign-off on every listed record that has none yet.

        The update is conditional on signed_off_at IS NULL, so a record
        signed by a concurrent reviewer keeps its original attestation.

        Returns:
            (signed, already_signed, missing) id lists
        """
        async with self.db.session() as session:
            result = await session.execute(
                select(CompletionRecordDB.id, CompletionRecordDB.signed_off_at)
                .where(CompletionRecordDB.id.in_(ids))
            )
            found = {row_id: at for row_id, at in result.all()}

            missing = [i for i in ids if i not in found]
            already_signed = [i for i in ids if i in found and found[i] is not None]
            pending = [i for i in ids if i in found and found[i] is None]

            if not pending:
                return [], already_signed, missing

            outcome = await session.execute(
                update(CompletionRecordDB)
                .where(
                    CompletionRecordDB.id.in_(pending),
                    CompletionRecordDB.signed_off_at.is_(None),
                )
                .values(signed_off_by=reviewer, signed_off_at=signed_off_at)
                .execution_options(synchronize_session=False)
            )

            signed = pending
            if outcome.rowcount != len(pending):
                # Lost part of the batch to a concurrent reviewer
                result = await session.execute(
                    select(
                        CompletionRecordDB.id,
                        CompletionRecordDB.signed_off_by,
                        CompletionRecordDB.signed_off_at,
                    ).where(CompletionRecordDB.id.in_(pending))
                )
                signed = []
                for row_id, by, at in result.all():
                    if by == reviewer and at == signed_off_at:
                        signed.append(row_id)
                    else:
                        already_signed.append(row_id)

            logger.info(f"Signed off {len(signed)} completion(s) by {reviewer}")
            return signed, already_signed, missing


# Singleton
_completion_repo: Optional[CompletionRepository] = None


def get_completion_repository() -> CompletionRepository:
    """Get the completion repository singleton."""
    global _completion_repo
    if _completion_repo is None:
        _completion_repo = CompletionRepository()
    return _completion_repo
