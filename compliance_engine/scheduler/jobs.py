"""
Scheduler manager for the auto-tick poll.

The engine itself has no timer. The host application starts this manager to
run the auto-tick correlator for every venue at a fixed interval (60s by
default); each pass is idempotent, so overlapping or repeated runs only
ever write one synthetic completion per (task, day).
"""

import logging
from typing import Optional, Dict, Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import pytz

from config import settings
from ..database.repositories.task_definitions import TaskDefinitionRepository, get_task_definition_repository
from ..services.auto_tick import AutoTickCorrelator
from ..utils.datetime_utils import get_local_today

logger = logging.getLogger(__name__)

AUTO_TICK_JOB_ID = "auto_tick_poll"


class SchedulerManager:
    """Runs the periodic auto-tick poll."""

    def __init__(
        self,
        correlator: AutoTickCorrelator,
        definitions: Optional[TaskDefinitionRepository] = None,
        interval_seconds: Optional[int] = None,
    ):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.timezone = pytz.timezone(settings.timezone)
        self.correlator = correlator
        self.definitions = definitions or get_task_definition_repository()
        self.interval_seconds = interval_seconds or settings.auto_tick_poll_seconds
        self.last_run: Dict[str, Any] = {}

    def start(self) -> None:
        """Start the scheduler with the auto-tick job."""
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)

        self.scheduler.add_job(
            self._auto_tick_job,
            IntervalTrigger(seconds=self.interval_seconds),
            id=AUTO_TICK_JOB_ID,
            name="Auto-tick Poll",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.start()
        logger.info(f"Scheduler started: auto-tick every {self.interval_seconds}s")

    def stop(self) -> None:
        """Stop the scheduler."""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    async def _auto_tick_job(self) -> Dict[str, int]:
        """One pass over every venue with an active checklist."""
        day = get_local_today()
        created: Dict[str, int] = {}

        try:
            venue_ids = await self.definitions.list_venue_ids()
        except Exception as e:
            logger.error(f"Auto-tick job could not list venues: {e}")
            return created

        for venue_id in venue_ids:
            try:
                records = await self.correlator.poll(venue_id, day)
                created[venue_id] = len(records)
            except Exception as e:
                # One venue's failure must not stop the others
                logger.error(f"Auto-tick poll failed for venue {venue_id}: {type(e).__name__}: {e}")

        self.last_run = {"day": day.isoformat(), "venues": len(venue_ids), "created": created}
        logger.debug(f"Auto-tick job finished: {self.last_run}")
        return created

    async def run_now(self) -> Dict[str, int]:
        """Run the auto-tick pass immediately (manual trigger)."""
        return await self._auto_tick_job()
