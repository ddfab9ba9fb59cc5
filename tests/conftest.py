"""
Pytest configuration and shared fixtures.
"""

import pytest
import pytest_asyncio
from types import SimpleNamespace

from compliance_engine.database.connection import Database
from compliance_engine.database.repositories.task_definitions import TaskDefinitionRepository
from compliance_engine.database.repositories.completions import CompletionRepository
from compliance_engine.integrations.activity_signals import StaticActivitySignalSource
from compliance_engine.services.auto_tick import AutoTickCorrelator
from compliance_engine.services.completion_tracker import CompletionTracker
from compliance_engine.services.sign_off import SignOffAuditor


@pytest_asyncio.fixture
async def database(tmp_path):
    """File-backed SQLite database, fresh per test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'compliance.db'}")
    assert await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def definitions(database):
    return TaskDefinitionRepository(database)


@pytest.fixture
def completions(database):
    return CompletionRepository(database)


@pytest.fixture
def signals():
    """In-memory activity signal source with no facts."""
    return StaticActivitySignalSource()


@pytest.fixture
def correlator(signals, definitions, completions):
    return AutoTickCorrelator(
        signals,
        definitions=definitions,
        completions=completions,
        system_actor="system:test",
    )


@pytest.fixture
def tracker(definitions, completions, correlator):
    return CompletionTracker(definitions=definitions, completions=completions, correlator=correlator)


@pytest.fixture
def auditor(completions):
    return SignOffAuditor(completions=completions)


@pytest.fixture
def make_task():
    """Factory for lightweight task definitions (no database)."""
    counter = {"next_id": 1}

    def _make(**overrides):
        data = {
            "id": counter["next_id"],
            "name": "Wipe benches",
            "frequency": "daily",
            "weekly_day": None,
            "shift": "opening",
            "scheduled_time": None,
            "sort_order": 0,
            "requires_quantitative_reading": False,
            "auto_tick_source": None,
            "is_active": True,
        }
        data.update(overrides)
        counter["next_id"] += 1
        return SimpleNamespace(**data)

    return _make


@pytest.fixture
def sample_definition():
    """Authoring payload for a single daily task."""
    return {
        "name": "Wash/sanitise bench tops",
        "area": "Kitchen",
        "frequency": "daily",
        "shift": "midday",
        "scheduled_time": "11:30",
        "method": "Spray and wipe with sanitiser",
        "requires_quantitative_reading": True,
        "sort_order": 10,
    }
