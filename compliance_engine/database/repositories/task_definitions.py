"""
Repository for checklist task definitions.

Definitions are append-only: they are created individually or by seeding
the default catalog, and retired by deactivation. There is no delete, so
historical completion records always resolve to their task.
"""

import logging
from typing import Optional, List, Dict, Any, Union

import pydantic
from sqlalchemy import select, func

from config.catalog import DEFAULT_TASKS, DEFAULT_CATALOG_VERSION
from ...exceptions import AlreadySeededError, ConfigurationError, NotFoundError
from ...models.checklist import TaskDefinitionCreate
from ..connection import Database, get_database
from ..models import TaskDefinitionDB

logger = logging.getLogger(__name__)


def _to_row(venue_id: str, definition: TaskDefinitionCreate, catalog_version: Optional[str] = None) -> TaskDefinitionDB:
    return TaskDefinitionDB(
        venue_id=venue_id,
        name=definition.name.strip(),
        area=definition.area,
        frequency=definition.frequency.value,
        weekly_day=definition.weekly_day.value if definition.weekly_day else None,
        shift=definition.shift.value,
        scheduled_time=definition.scheduled_time,
        method=definition.method,
        requires_quantitative_reading=definition.requires_quantitative_reading,
        responsible_role=definition.responsible_role or "any",
        auto_tick_source=definition.auto_tick_source or None,
        sort_order=definition.sort_order,
        is_active=definition.is_active,
        catalog_version=catalog_version,
    )


def parse_definition(data: Union[TaskDefinitionCreate, Dict[str, Any]]) -> TaskDefinitionCreate:
    """Validate authoring input; malformed definitions are configuration errors."""
    if isinstance(data, TaskDefinitionCreate):
        return data
    try:
        return TaskDefinitionCreate.model_validate(data)
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Invalid task definition: {e}") from e


class TaskDefinitionRepository:
    """Repository for task definition operations."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_database()

    async def create(
        self,
        venue_id: str,
        data: Union[TaskDefinitionCreate, Dict[str, Any]],
    ) -> TaskDefinitionDB:
        """Author a single task definition."""
        definition = parse_definition(data)

        async with self.db.session() as session:
            row = _to_row(venue_id, definition)
            session.add(row)
            await session.flush()

            logger.info(f"Created task definition {row.id} '{row.name}' for venue {venue_id}")
            return row

    async def get_by_id(self, task_id: int) -> Optional[TaskDefinitionDB]:
        """Get a task definition by ID (active or not)."""
        async with self.db.session() as session:
            return await session.get(TaskDefinitionDB, task_id)

    async def list_active(self, venue_id: str) -> List[TaskDefinitionDB]:
        """Active definitions for a venue, in presentation order."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TaskDefinitionDB)
                .where(
                    TaskDefinitionDB.venue_id == venue_id,
                    TaskDefinitionDB.is_active.is_(True),
                )
                .order_by(TaskDefinitionDB.sort_order, TaskDefinitionDB.id)
            )
            return list(result.scalars().all())

    async def list_all(self, venue_id: str) -> List[TaskDefinitionDB]:
        """Every definition for a venue, including retired ones."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TaskDefinitionDB)
                .where(TaskDefinitionDB.venue_id == venue_id)
                .order_by(TaskDefinitionDB.sort_order, TaskDefinitionDB.id)
            )
            return list(result.scalars().all())

    async def count_active(self, venue_id: str) -> int:
        async with self.db.session() as session:
            result = await session.execute(
                select(func.count()).select_from(TaskDefinitionDB).where(
                    TaskDefinitionDB.venue_id == venue_id,
                    TaskDefinitionDB.is_active.is_(True),
                )
            )
            return result.scalar() or 0

    async def seed_defaults(self, venue_id: str, force: bool = False) -> List[TaskDefinitionDB]:
        """
        Insert the default catalog for a venue.

        Raises AlreadySeededError if the venue already has active
        definitions, unless force=True.
        """
        async with self.db.session() as session:
            result = await session.execute(
                select(func.count()).select_from(TaskDefinitionDB).where(
                    TaskDefinitionDB.venue_id == venue_id,
                    TaskDefinitionDB.is_active.is_(True),
                )
            )
            active_count = result.scalar() or 0
            if active_count and not force:
                raise AlreadySeededError(venue_id, active_count)

            rows = [
                _to_row(venue_id, parse_definition(task), catalog_version=DEFAULT_CATALOG_VERSION)
                for task in DEFAULT_TASKS
            ]
            session.add_all(rows)
            await session.flush()

            logger.info(
                f"Seeded {len(rows)} default tasks (catalog {DEFAULT_CATALOG_VERSION}) "
                f"for venue {venue_id}"
            )
            return rows

    async def _set_active(self, task_id: int, is_active: bool) -> TaskDefinitionDB:
        async with self.db.session() as session:
            row = await session.get(TaskDefinitionDB, task_id)
            if row is None:
                raise NotFoundError(f"Task definition {task_id} not found")

            if row.is_active != is_active:
                row.is_active = is_active
                await session.flush()
                logger.info(
                    f"{'Activated' if is_active else 'Deactivated'} task definition {task_id}"
                )
            return row

    async def activate(self, task_id: int) -> TaskDefinitionDB:
        """Re-enable a task definition. Idempotent."""
        return await self._set_active(task_id, True)

    async def deactivate(self, task_id: int) -> TaskDefinitionDB:
        """Retire a task definition. Idempotent; history is kept."""
        return await self._set_active(task_id, False)

    async def list_venue_ids(self) -> List[str]:
        """Venues with at least one active definition."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TaskDefinitionDB.venue_id)
                .where(TaskDefinitionDB.is_active.is_(True))
                .distinct()
                .order_by(TaskDefinitionDB.venue_id)
            )
            return list(result.scalars().all())

    async def auto_tick_sources(self, venue_id: str) -> List[str]:
        """Distinct activity keys declared by a venue's active definitions."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TaskDefinitionDB.auto_tick_source)
                .where(
                    TaskDefinitionDB.venue_id == venue_id,
                    TaskDefinitionDB.is_active.is_(True),
                    TaskDefinitionDB.auto_tick_source.is_not(None),
                )
                .distinct()
                .order_by(TaskDefinitionDB.auto_tick_source)
            )
            return list(result.scalars().all())


# Singleton
_task_definition_repo: Optional[TaskDefinitionRepository] = None


def get_task_definition_repository() -> TaskDefinitionRepository:
    """Get the task definition repository singleton."""
    global _task_definition_repo
    if _task_definition_repo is None:
        _task_definition_repo = TaskDefinitionRepository()
    return _task_definition_repo
