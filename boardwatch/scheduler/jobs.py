"""Job definitions for the scheduler."""

import asyncio
from datetime import datetime
from typing import Callable, Any, Optional
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass
class Job:
    """Definition of a periodic job."""

    name: str
    func: Callable[..., Any]
    interval_seconds: float
    description: str = ""
    enabled: bool = True
    args: tuple = field(default_factory=tuple)
    kwargs: dict = field(default_factory=dict)
    last_run: Optional[datetime] = None


class JobRegistry:
    """Registry for managing periodic jobs."""

    def __init__(self):
        self._jobs: dict[str, Job] = {}

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        interval_seconds: float,
        description: str = "",
        enabled: bool = True,
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> Job:
        """Register a new job.

        Args:
            name: Unique job name
            func: Function to execute
            interval_seconds: Seconds between two runs
            description: Job description
            enabled: Whether job is enabled
            args: Positional arguments for func
            kwargs: Keyword arguments for func

        Returns:
            Created Job instance
        """
        if interval_seconds <= 0:
            raise ValueError(f"Invalid interval for {name}: {interval_seconds}")

        job = Job(
            name=name,
            func=func,
            interval_seconds=interval_seconds,
            description=description,
            enabled=enabled,
            args=args,
            kwargs=kwargs or {},
        )
        self._jobs[name] = job
        return job

    def get(self, name: str) -> Optional[Job]:
        """Get job by name."""
        return self._jobs.get(name)

    def list_jobs(self) -> list[Job]:
        """List all registered jobs."""
        return list(self._jobs.values())

    def list_enabled(self) -> list[Job]:
        """List enabled jobs only."""
        return [job for job in self._jobs.values() if job.enabled]

    def enable(self, name: str) -> bool:
        """Enable a job.

        Returns:
            True if enabled, False if not found
        """
        job = self._jobs.get(name)
        if job:
            job.enabled = True
            return True
        return False

    def disable(self, name: str) -> bool:
        """Disable a job.

        Returns:
            True if disabled, False if not found
        """
        job = self._jobs.get(name)
        if job:
            job.enabled = False
            return True
        return False

    async def run_job(self, name: str) -> Any:
        """Run a job immediately.

        Args:
            name: Job name to run

        Returns:
            Result from job execution

        Raises:
            KeyError: If job not found
        """
        job = self._jobs.get(name)
        if not job:
            raise KeyError(f"Job not found: {name}")

        result = job.func(*job.args, **job.kwargs)
        if asyncio.iscoroutine(result):
            result = await result

        job.last_run = datetime.now()
        return result


def create_default_jobs(
    registry: JobRegistry,
    container,
    interval_seconds: Optional[float] = None,
) -> None:
    """Register the overflow and archive sweeps.

    Each sweep broadcasts its messages to the notify room. Board errors are
    broadcast by the monitor's default error handler.

    Args:
        registry: Job registry to add jobs to
        container: DI container for service access
        interval_seconds: Sweep interval, defaults to the monitor settings
    """
    if interval_seconds is None:
        interval_seconds = container.settings.monitor.interval_seconds

    async def overflow_sweep():
        """Report overflowing lists to the notify room."""
        report = await container.monitor_service.check_overflow()
        await container.broadcast_service.broadcast_all(report.messages)
        return report

    async def archive_sweep():
        """Archive stale done cards and report them to the notify room."""
        report = await container.monitor_service.check_archive()
        await container.broadcast_service.broadcast_all(report.messages)
        return report

    registry.register(
        name="overflow_sweep",
        func=overflow_sweep,
        interval_seconds=interval_seconds,
        description="Report lists holding more cards than their capacity",
    )

    registry.register(
        name="archive_sweep",
        func=archive_sweep,
        interval_seconds=interval_seconds,
        description="Archive cards idle in the done list",
    )
