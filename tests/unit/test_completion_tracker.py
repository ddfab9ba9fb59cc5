"""
Unit tests for CompletionTracker.

Tests cover:
- Recording manual completions and their validation rules
- Day status (done / total), including auto-ticked tasks
- Week status and month compliance
"""

import pytest
import pytest_asyncio
from datetime import date, datetime
from types import SimpleNamespace

from compliance_engine.exceptions import NotFoundError, ValidationError
from compliance_engine.services.completion_tracker import build_day_status

VENUE = "venue-bondi"


@pytest_asyncio.fixture
async def sanitiser_task(definitions):
    return await definitions.create(VENUE, {
        "name": "Wash/sanitise bench tops",
        "shift": "midday",
        "requires_quantitative_reading": True,
        "sort_order": 10,
    })


@pytest_asyncio.fixture
async def mop_task(definitions):
    return await definitions.create(VENUE, {"name": "Mop kitchen", "shift": "opening", "sort_order": 3})


@pytest_asyncio.fixture
async def fridge_task(definitions):
    return await definitions.create(VENUE, {
        "name": "Clean down fridges/benchtops/sanitise",
        "shift": "closing",
        "auto_tick_source": "temp_check",
        "sort_order": 23,
    })


@pytest_asyncio.fixture
async def hood_task(definitions):
    return await definitions.create(VENUE, {
        "name": "Hood degrease",
        "frequency": "weekly",
        "weekly_day": "thursday",
        "shift": "closing",
        "sort_order": 40,
    })


# ============================================================
# RECORD COMPLETION
# ============================================================

class TestRecordCompletion:
    """Tests for record_completion."""

    @pytest.mark.asyncio
    async def test_records_manual_completion(self, tracker, mop_task):
        record = await tracker.record_completion(mop_task.id, date(2026, 2, 24), "alice")

        assert record.task_definition_id == mop_task.id
        assert record.venue_id == VENUE
        assert record.completed_by == "alice"
        assert record.completed_at.date() == date(2026, 2, 24)
        assert record.is_auto is False

    @pytest.mark.asyncio
    async def test_missing_reading_rejected_and_nothing_written(self, tracker, completions, sanitiser_task):
        """A reading-required task without a reading leaves zero rows."""
        with pytest.raises(ValidationError, match="reading required"):
            await tracker.record_completion(sanitiser_task.id, date(2026, 2, 24), "alice", reading=None)

        assert await completions.list_for_day(VENUE, date(2026, 2, 24)) == []

    @pytest.mark.asyncio
    async def test_reading_stored(self, tracker, sanitiser_task):
        record = await tracker.record_completion(
            sanitiser_task.id, date(2026, 2, 24), "alice", reading=200.0, evidence_ref="evidence/1.jpg"
        )

        assert record.numeric_reading == 200.0
        assert record.evidence_ref == "evidence/1.jpg"

    @pytest.mark.asyncio
    async def test_zero_reading_is_a_reading(self, tracker, sanitiser_task):
        record = await tracker.record_completion(sanitiser_task.id, date(2026, 2, 24), "alice", reading=0.0)

        assert record.numeric_reading == 0.0

    @pytest.mark.asyncio
    async def test_blank_actor_rejected(self, tracker, mop_task):
        with pytest.raises(ValidationError):
            await tracker.record_completion(mop_task.id, date(2026, 2, 24), "   ")

    @pytest.mark.asyncio
    async def test_unknown_task(self, tracker):
        with pytest.raises(NotFoundError):
            await tracker.record_completion(9999, date(2026, 2, 24), "alice")

    @pytest.mark.asyncio
    async def test_inactive_task_can_still_be_completed(self, tracker, definitions, mop_task):
        await definitions.deactivate(mop_task.id)

        record = await tracker.record_completion(mop_task.id, date(2026, 2, 24), "alice")

        assert record.id is not None


# ============================================================
# DAY STATUS
# ============================================================

class TestDayStatus:
    """Tests for day_status."""

    @pytest.mark.asyncio
    async def test_nothing_done(self, tracker, mop_task, sanitiser_task):
        status = await tracker.day_status(VENUE, date(2026, 2, 24))

        assert status.done == 0
        assert status.total == 2
        # Presentation order (sort_order)
        assert status.outstanding_task_ids == [mop_task.id, sanitiser_task.id]

    @pytest.mark.asyncio
    async def test_duplicate_completions_counted_once(self, tracker, mop_task, sanitiser_task):
        day = date(2026, 2, 24)
        await tracker.record_completion(mop_task.id, day, "alice")
        await tracker.record_completion(mop_task.id, day, "bob")

        status = await tracker.day_status(VENUE, day)

        assert status.done == 1
        assert status.total == 2
        assert status.done_task_ids == [mop_task.id]
        assert len(await tracker.day_records(VENUE, day)) == 2

    @pytest.mark.asyncio
    async def test_weekly_task_counts_only_on_its_day(self, tracker, mop_task, hood_task):
        wednesday = await tracker.day_status(VENUE, date(2026, 2, 25))
        thursday = await tracker.day_status(VENUE, date(2026, 2, 26))

        assert wednesday.total == 1
        assert thursday.total == 2

    @pytest.mark.asyncio
    async def test_inactive_tasks_not_counted(self, tracker, definitions, mop_task, sanitiser_task):
        await definitions.deactivate(sanitiser_task.id)

        status = await tracker.day_status(VENUE, date(2026, 2, 24))

        assert status.total == 1

    @pytest.mark.asyncio
    async def test_temp_check_signal_auto_satisfies(self, tracker, signals, fridge_task, mop_task):
        """A temp_check fact on 2026-02-24 marks the fridge clean done."""
        day = date(2026, 2, 24)
        signals.record(VENUE, "temp_check", day)

        status = await tracker.day_status(VENUE, day)

        assert fridge_task.id in status.done_task_ids
        assert status.auto_ticked_task_ids == [fridge_task.id]
        assert status.done == 1
        assert status.total == 2
        assert await tracker.day_records(VENUE, day) == []

    @pytest.mark.asyncio
    async def test_explicit_auto_ticked_set(self, tracker, fridge_task):
        status = await tracker.day_status(VENUE, date(2026, 2, 24), auto_ticked={"temp_check"})

        assert status.all_done is True
        assert status.percent == 100.0

    @pytest.mark.asyncio
    async def test_unavailable_signal_does_not_block_status(self, tracker, signals, fridge_task, mop_task):
        day = date(2026, 2, 24)
        signals.mark_unavailable("temp_check")
        await tracker.record_completion(mop_task.id, day, "alice")

        status = await tracker.day_status(VENUE, day)

        assert status.done == 1
        assert status.outstanding_task_ids == [fridge_task.id]


def test_build_day_status_without_due_tasks():
    status = build_day_status(VENUE, date(2026, 2, 24), [], set())

    assert status.total == 0
    assert status.all_done is False
    assert status.percent == 100.0


def test_build_day_status_skips_malformed():
    good = SimpleNamespace(id=1, name="Mop", frequency="daily", weekly_day=None,
                           auto_tick_source=None, is_active=True)
    bad = SimpleNamespace(id=2, name="Broken", frequency="weekly", weekly_day=None,
                          auto_tick_source=None, is_active=True)

    status = build_day_status(VENUE, date(2026, 2, 24), [good, bad], {1})

    assert status.total == 1
    assert status.done == 1


# ============================================================
# WEEK / MONTH
# ============================================================

class TestWeekAndMonth:
    """Tests for week_status, month_status and month_compliance."""

    @pytest.mark.asyncio
    async def test_week_status_sunday_to_saturday(self, tracker, mop_task, hood_task):
        await tracker.record_completion(mop_task.id, date(2026, 2, 24), "alice")

        week = await tracker.week_status(VENUE, date(2026, 2, 25))

        assert [s.day for s in week] == [date(2026, 2, 22 + i) for i in range(7)]
        assert [s.total for s in week] == [1, 1, 1, 1, 2, 1, 1]
        assert week[2].done == 1
        assert sum(s.done for s in week) == 1

    @pytest.mark.asyncio
    async def test_week_status_matches_day_status_for_signal(self, tracker, signals, fridge_task):
        day = date(2026, 2, 24)
        signals.record(VENUE, "temp_check", day)

        week = await tracker.week_status(VENUE, day)
        single = await tracker.day_status(VENUE, day)

        tuesday = week[2]
        assert tuesday.day == day
        assert tuesday.done == single.done == 1
        assert tuesday.auto_ticked_task_ids == [fridge_task.id]
        assert week[3].done == 0

    @pytest.mark.asyncio
    async def test_month_status_returns_records(self, tracker, mop_task):
        await tracker.record_completion(mop_task.id, date(2026, 2, 3), "alice")
        await tracker.record_completion(mop_task.id, date(2026, 3, 3), "alice")

        records = await tracker.month_status(VENUE, 2026, 2)

        assert len(records) == 1
        assert records[0].completed_at.month == 2

    @pytest.mark.asyncio
    async def test_month_compliance_past_month(self, tracker, mop_task):
        for day_number in range(1, 29):
            if day_number != 14:
                await tracker.record_completion(mop_task.id, date(2026, 2, day_number), "alice")

        summary = await tracker.month_compliance(VENUE, 2026, 2, today=date(2026, 3, 10))

        assert summary.total_days == 28
        assert summary.compliant_days == 27
        assert summary.non_compliant_dates == [date(2026, 2, 14)]

    @pytest.mark.asyncio
    async def test_month_compliance_counts_signal_days(self, tracker, signals, mop_task, fridge_task):
        for day_number in range(1, 29):
            await tracker.record_completion(mop_task.id, date(2026, 2, day_number), "alice")
            if day_number != 14:
                signals.record(VENUE, "temp_check", date(2026, 2, day_number))

        summary = await tracker.month_compliance(VENUE, 2026, 2, today=date(2026, 3, 10))

        assert summary.compliant_days == 27
        assert summary.non_compliant_dates == [date(2026, 2, 14)]

    @pytest.mark.asyncio
    async def test_month_compliance_uses_current_definitions(self, tracker, definitions, mop_task, sanitiser_task):
        """A task retired after the month drops out of that month's due days."""
        for day_number in range(1, 29):
            await tracker.record_completion(mop_task.id, date(2026, 2, day_number), "alice")
        await definitions.deactivate(sanitiser_task.id)

        summary = await tracker.month_compliance(VENUE, 2026, 2, today=date(2026, 3, 10))

        assert summary.compliant_days == 28

    @pytest.mark.asyncio
    async def test_month_compliance_current_month_stops_at_today(self, tracker, mop_task):
        await tracker.record_completion(mop_task.id, date(2026, 2, 1), "alice")
        await tracker.record_completion(mop_task.id, date(2026, 2, 2), "alice")

        summary = await tracker.month_compliance(VENUE, 2026, 2, today=date(2026, 2, 3))

        assert summary.total_days == 3
        assert summary.compliant_days == 2
        assert summary.non_compliant_dates == [date(2026, 2, 3)]

    @pytest.mark.asyncio
    async def test_month_compliance_future_month(self, tracker, mop_task):
        summary = await tracker.month_compliance(VENUE, 2026, 4, today=date(2026, 2, 3))

        assert summary.total_days == 0
        assert summary.compliant_days == 0

    @pytest.mark.asyncio
    async def test_pending_sign_off(self, tracker, auditor, mop_task):
        first = await tracker.record_completion(mop_task.id, date(2026, 2, 24), "alice")
        second = await tracker.record_completion(mop_task.id, date(2026, 2, 24), "bob")
        await auditor.sign_off([first.id], "manager", now=datetime(2026, 2, 24, 22, 0))

        pending = await tracker.pending_sign_off(VENUE, date(2026, 2, 24))

        assert [r.id for r in pending] == [second.id]
