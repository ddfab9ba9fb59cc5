"""
Auto-tick correlation.

A task that declares an auto_tick_source is satisfied for the day when the
matching activity signal is true, e.g. a closing fridge clean once the day's
temperature check is logged. The correlator reads signals, and on request
writes at most one synthetic completion per (task, day).

Signal failures never reach the caller: an unreachable source means "not
auto-satisfied" for that key, and the rest of the day still resolves.
"""

import logging
from datetime import date
from typing import Optional, Set, List, Iterable

from config import settings
from ..database.models import CompletionRecordDB
from ..database.repositories.task_definitions import TaskDefinitionRepository, get_task_definition_repository
from ..database.repositories.completions import CompletionRepository, get_completion_repository
from ..exceptions import SignalUnavailableError
from ..integrations.activity_signals import ActivitySignalSource
from ..scheduler.recurrence import due_tasks
from ..utils.datetime_utils import get_local_today, stamp_on_day

logger = logging.getLogger(__name__)

AUTO_COMPLETION_NOTE = "Auto-completed from activity"


class AutoTickCorrelator:
    """Infers task completion from external activity signals."""

    def __init__(
        self,
        signal_source: ActivitySignalSource,
        definitions: Optional[TaskDefinitionRepository] = None,
        completions: Optional[CompletionRepository] = None,
        system_actor: Optional[str] = None,
    ):
        self.signal_source = signal_source
        self.definitions = definitions or get_task_definition_repository()
        self.completions = completions or get_completion_repository()
        self.system_actor = system_actor or settings.auto_tick_system_actor

    async def _check_signal(self, venue_id: str, key: str, day: date) -> bool:
        try:
            return bool(await self.signal_source.occurred(venue_id, key, day))
        except SignalUnavailableError as e:
            logger.warning(f"Auto-tick signal unknown for venue {venue_id} on {day}: {e}")
        except Exception as e:
            logger.error(
                f"Auto-tick signal '{key}' failed for venue {venue_id} on {day}: "
                f"{type(e).__name__}: {e}"
            )
        return False

    async def resolve_auto_ticks(
        self,
        venue_id: str,
        day: date,
        materialize: bool = False,
    ) -> Set[str]:
        """
        Activity keys satisfied for a venue-day.

        Only keys declared by active definitions are queried. With
        materialize=True the synthetic completion records are written too.
        """
        keys = await self.definitions.auto_tick_sources(venue_id)
        satisfied: Set[str] = set()
        for key in keys:
            if await self._check_signal(venue_id, key, day):
                satisfied.add(key)

        logger.debug(f"Auto-tick sources for venue {venue_id} on {day}: {sorted(satisfied)}")

        if materialize and satisfied:
            await self.materialize(venue_id, day, satisfied)
        return satisfied

    async def materialize(
        self,
        venue_id: str,
        day: date,
        sources: Optional[Iterable[str]] = None,
    ) -> List[CompletionRecordDB]:
        """
        Write synthetic completions for due tasks whose source is satisfied.

        Idempotent per (task, day): tasks that already have any completion
        that day, manual or auto, are skipped. Returns only the newly
        written records.
        """
        if sources is None:
            sources = await self.resolve_auto_ticks(venue_id, day)
        sources = set(sources)
        if not sources:
            return []

        definitions = await self.definitions.list_active(venue_id)
        already_done = await self.completions.completed_task_ids(venue_id, day)
        created: List[CompletionRecordDB] = []
        for task in due_tasks(definitions, day):
            if task.auto_tick_source not in sources or task.id in already_done:
                continue
            record = await self.completions.add_auto_if_absent(
                task_definition_id=task.id,
                venue_id=venue_id,
                day=day,
                completed_by=self.system_actor,
                completed_at=stamp_on_day(day),
                notes=AUTO_COMPLETION_NOTE,
            )
            if record is not None:
                created.append(record)

        if created:
            logger.info(f"Materialized {len(created)} auto completion(s) for venue {venue_id} on {day}")
        return created

    async def poll(self, venue_id: str, day: Optional[date] = None) -> List[CompletionRecordDB]:
        """One polling pass: resolve signals and write what they prove."""
        day = day or get_local_today()
        sources = await self.resolve_auto_ticks(venue_id, day)
        return await self.materialize(venue_id, day, sources)
