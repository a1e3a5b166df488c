"""Sweep scheduler using APScheduler."""

from typing import Any, Optional
import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .jobs import Job, JobRegistry

logger = logging.getLogger(__name__)

# Sweeps only read their own snapshot, so a slow sweep may overlap the next tick.
MAX_OVERLAPPING_RUNS = 3


class SweepScheduler:
    """Runs every enabled job of a registry on its own fixed interval.

    The registry holds the enabled flag, so a paused sweep stays paused when
    the scheduler is restarted.
    """

    def __init__(self, registry: JobRegistry, timezone: str = "Europe/Paris"):
        """Initialize scheduler.

        Args:
            registry: Job registry with registered jobs
            timezone: Timezone for the scheduler clock
        """
        self._registry = registry
        self._timezone = timezone
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        if self._scheduler is not None:
            logger.warning("Scheduler already running")
            return

        scheduler = AsyncIOScheduler(timezone=self._timezone)
        jobs = self._registry.list_enabled()
        for job in jobs:
            self._schedule(scheduler, job)

        scheduler.start()
        self._scheduler = scheduler
        logger.info(f"Scheduler started with {len(jobs)} sweep(s)")

    def stop(self) -> None:
        if self._scheduler is None:
            return

        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Scheduler stopped")

    def _schedule(self, scheduler: AsyncIOScheduler, job: Job) -> None:
        """Add one registry job as an interval job."""

        async def run_sweep() -> Any:
            try:
                return await self._registry.run_job(job.name)
            except Exception:
                logger.exception(f"Job {job.name} failed")
                raise

        scheduler.add_job(
            run_sweep,
            trigger=IntervalTrigger(seconds=job.interval_seconds, timezone=self._timezone),
            id=job.name,
            name=job.description or job.name,
            replace_existing=True,
            max_instances=MAX_OVERLAPPING_RUNS,
            coalesce=False,
        )
        logger.debug(f"Scheduled {job.name} every {job.interval_seconds:g}s")

    def pause_job(self, name: str) -> bool:
        """Stop running a sweep until it is resumed.

        Returns:
            True if paused, False if not found
        """
        if not self._registry.disable(name):
            return False

        if self._scheduler is not None:
            try:
                self._scheduler.pause_job(name)
            except JobLookupError:
                logger.debug(f"Job {name} was not scheduled")
        logger.info(f"Paused {name}")
        return True

    def resume_job(self, name: str) -> bool:
        """Run a paused sweep on its interval again.

        Returns:
            True if resumed, False if not found
        """
        job = self._registry.get(name)
        if job is None:
            return False

        self._registry.enable(name)
        if self._scheduler is not None:
            # Jobs disabled at start were never handed to APScheduler
            if self._scheduler.get_job(name) is None:
                self._schedule(self._scheduler, job)
            else:
                self._scheduler.resume_job(name)
        logger.info(f"Resumed {name}")
        return True

    async def run_job_now(self, name: str) -> Any:
        """Run a sweep immediately, outside its interval.

        Raises:
            KeyError: If job not found
        """
        return await self._registry.run_job(name)

    def get_job_status(self, name: str) -> Optional[dict]:
        """Get status of a job.

        Returns:
            Job status dict or None if not found
        """
        job = self._registry.get(name)
        if not job:
            return None

        status = {
            "name": job.name,
            "description": job.description,
            "interval_seconds": job.interval_seconds,
            "enabled": job.enabled,
            "last_run": job.last_run.isoformat() if job.last_run else None,
        }

        if self._scheduler is not None:
            scheduled = self._scheduler.get_job(name)
            if scheduled:
                next_run = scheduled.next_run_time
                status["next_run"] = next_run.isoformat() if next_run else None

        return status

    def list_jobs(self) -> list[dict]:
        """List all jobs with their status."""
        return [self.get_job_status(job.name) for job in self._registry.list_jobs()]
