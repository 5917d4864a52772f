"""
Sweep Scheduler for MarketLens
Runs the expired-query sweep on an interval using APScheduler
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from typing import Dict, Any, List, Optional
import asyncio
import logging

from ..config.settings import settings
from ..database.manager import db_manager
from ..database.operations import DatabaseOperations

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "expired_query_sweep"


class SweepScheduler:
    """Interval job that deletes expired queries"""

    def __init__(self, interval_minutes: Optional[int] = None):
        """
        Initialize scheduler

        Args:
            interval_minutes: Minutes between sweeps. Defaults to settings.CLEANUP_INTERVAL_MINUTES
        """
        if interval_minutes is None:
            interval_minutes = settings.CLEANUP_INTERVAL_MINUTES

        self.interval_minutes = interval_minutes
        self.scheduler = AsyncIOScheduler(
            job_defaults={
                "coalesce": True,  # Coalesce missed runs
                "max_instances": 1,
            },
            timezone=settings.SCHEDULER_TIMEZONE
        )
        self.last_deleted_count: Optional[int] = None

        logger.info(f"SweepScheduler initialized (interval: {interval_minutes} min)")

    @property
    def enabled(self) -> bool:
        return self.interval_minutes > 0

    async def run_sweep(self) -> int:
        """
        Delete expired queries in a fresh session

        Returns:
            Number of queries deleted
        """
        logger.info("Executing scheduled expiry sweep")

        try:
            async with db_manager.get_session() as session:
                deleted = await DatabaseOperations.cleanup_expired_queries(session)
        except Exception as e:
            logger.error(f"Expiry sweep failed: {e}")
            raise

        self.last_deleted_count = deleted
        logger.info(f"Expiry sweep removed {deleted} queries")
        return deleted

    def schedule_sweep(self) -> str:
        """
        Add (or replace) the interval sweep job

        Returns:
            Job ID

        Raises:
            ValueError: If the interval is not positive
        """
        if not self.enabled:
            raise ValueError("Sweep interval must be greater than 0 minutes")

        self.scheduler.add_job(
            func=self.run_sweep,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=SWEEP_JOB_ID,
            name="Expired query sweep",
            replace_existing=True
        )

        logger.info(f"Scheduled expiry sweep every {self.interval_minutes} min: {SWEEP_JOB_ID}")
        return SWEEP_JOB_ID

    async def start(self):
        """Start scheduler with the sweep job if enabled"""
        if not self.enabled:
            logger.info("Expiry sweep disabled (CLEANUP_INTERVAL_MINUTES=0)")
            return

        if not self.scheduler.running:
            self.scheduler.start()
            self.schedule_sweep()
            logger.info("Scheduler started")

    async def stop(self):
        """Stop scheduler gracefully"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            # AsyncIOScheduler finishes shutting down on the next loop iteration
            await asyncio.sleep(0)
            logger.info("Scheduler stopped")

    def list_jobs(self) -> List[Dict[str, Any]]:
        """
        List all scheduled jobs

        Returns:
            List of job details dicts
        """
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger)
            }
            for job in self.scheduler.get_jobs()
        ]


# Global scheduler instance
sweep_scheduler = SweepScheduler()
