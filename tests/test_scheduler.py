"""
Tests for the expiry sweep scheduler
"""

import pytest
import asyncio
from datetime import timedelta
from unittest.mock import patch

from marketlens.services.scheduler import SweepScheduler, SWEEP_JOB_ID
from marketlens.database.operations import DatabaseOperations
from marketlens.database.models import utcnow


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
async def running_scheduler():
    """Scheduler with a five minute interval, stopped after the test"""
    sched = SweepScheduler(interval_minutes=5)
    await sched.start()

    yield sched

    await sched.stop()


# ============================================================
# Scheduling
# ============================================================

class TestScheduling:
    """Starting, stopping and job registration"""

    async def test_disabled_scheduler_does_not_start(self):
        sched = SweepScheduler(interval_minutes=0)

        await sched.start()

        assert sched.enabled is False
        assert sched.scheduler.running is False
        assert sched.list_jobs() == []

    def test_schedule_sweep_requires_interval(self):
        sched = SweepScheduler(interval_minutes=0)

        with pytest.raises(ValueError):
            sched.schedule_sweep()

    async def test_start_registers_sweep_job(self, running_scheduler):
        assert running_scheduler.scheduler.running

        jobs = running_scheduler.list_jobs()

        assert [job["id"] for job in jobs] == [SWEEP_JOB_ID]
        assert jobs[0]["next_run"] is not None
        assert "0:05:00" in jobs[0]["trigger"]

    async def test_reschedule_replaces_job(self, running_scheduler):
        running_scheduler.schedule_sweep()

        assert len(running_scheduler.list_jobs()) == 1

    async def test_stop(self):
        sched = SweepScheduler(interval_minutes=1)
        await sched.start()

        await sched.stop()

        assert sched.scheduler.running is False

    async def test_restart_after_stop(self):
        """A stopped scheduler can be started again with its sweep job"""
        sched = SweepScheduler(interval_minutes=1)
        await sched.start()
        await sched.stop()

        await sched.start()
        await asyncio.sleep(0.05)

        try:
            assert sched.scheduler.running is True
            assert [job["id"] for job in sched.list_jobs()] == [SWEEP_JOB_ID]
        finally:
            await sched.stop()


# ============================================================
# Sweep Execution
# ============================================================

class TestRunSweep:
    """Running the sweep against a database"""

    async def test_run_sweep_deletes_expired(self, test_db):
        async with test_db.get_session() as session:
            await DatabaseOperations.create_query(
                session, input="old", query_type="keyword",
                expires_at=utcnow() - timedelta(hours=1)
            )
            await DatabaseOperations.create_query(
                session, input="fresh", query_type="keyword",
                expires_at=utcnow() + timedelta(hours=1)
            )

        sched = SweepScheduler(interval_minutes=0)
        with patch("marketlens.services.scheduler.db_manager", test_db):
            deleted = await sched.run_sweep()
            again = await sched.run_sweep()

        assert deleted == 1
        assert again == 0
        assert sched.last_deleted_count == 0
