"""Tests for scheduler and job registry."""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from boardwatch.domain.models import SweepReport
from boardwatch.scheduler.jobs import Job, JobRegistry, create_default_jobs
from boardwatch.scheduler.scheduler import MAX_OVERLAPPING_RUNS, SweepScheduler

STARTED = datetime(2024, 6, 1, tzinfo=timezone.utc)


def noop():
    pass


class TestJob:
    """Tests for Job dataclass."""

    def test_job_creation(self):
        """Should create job with required fields."""
        job = Job(name="test_job", func=noop, interval_seconds=300)

        assert job.name == "test_job"
        assert job.func is noop
        assert job.interval_seconds == 300
        assert job.enabled is True
        assert job.description == ""
        assert job.last_run is None


class TestJobRegistry:
    """Tests for JobRegistry."""

    @pytest.fixture
    def registry(self):
        return JobRegistry()

    def test_register_job(self, registry):
        """Should register a new job."""
        job = registry.register(name="test", func=noop, interval_seconds=60)

        assert job.name == "test"
        assert registry.get("test") == job

    @pytest.mark.parametrize("interval", [0, -5])
    def test_register_invalid_interval(self, registry, interval):
        """Should reject non-positive intervals."""
        with pytest.raises(ValueError, match="Invalid interval"):
            registry.register(name="test", func=noop, interval_seconds=interval)

    def test_list_enabled_jobs(self, registry):
        """Should list only enabled jobs."""
        registry.register(name="enabled", func=noop, interval_seconds=60)
        registry.register(name="disabled", func=noop, interval_seconds=60, enabled=False)

        jobs = registry.list_enabled()

        assert [j.name for j in jobs] == ["enabled"]

    def test_enable_disable(self, registry):
        registry.register(name="test", func=noop, interval_seconds=60, enabled=False)

        assert registry.enable("test") is True
        assert registry.get("test").enabled is True
        assert registry.disable("test") is True
        assert registry.get("test").enabled is False
        assert registry.enable("nonexistent") is False

    @pytest.mark.asyncio
    async def test_run_job_async(self, registry):
        """Should await async jobs and record the run."""
        async def sweep():
            return "swept"

        registry.register(name="sweep", func=sweep, interval_seconds=60)

        assert await registry.run_job("sweep") == "swept"
        assert registry.get("sweep").last_run is not None

    @pytest.mark.asyncio
    async def test_run_job_sync_with_args(self, registry):
        registry.register(
            name="add", func=lambda x, y=0: x + y, interval_seconds=60, args=(1,), kwargs={"y": 2}
        )

        assert await registry.run_job("add") == 3

    @pytest.mark.asyncio
    async def test_run_nonexistent_job(self, registry):
        """Should raise KeyError for nonexistent job."""
        with pytest.raises(KeyError, match="not found"):
            await registry.run_job("nonexistent")


class TestCreateDefaultJobs:
    """Tests for create_default_jobs function."""

    @pytest.fixture
    def container(self):
        container = MagicMock()
        container.settings.monitor.interval_seconds = 300.0
        container.monitor_service.check_overflow = AsyncMock(
            return_value=SweepReport(policy="overflow", started_at=STARTED, messages=["too many cards"])
        )
        container.monitor_service.check_archive = AsyncMock(
            return_value=SweepReport(policy="archive", started_at=STARTED, messages=[])
        )
        container.broadcast_service.broadcast_all = AsyncMock(return_value=1)
        return container

    def test_registers_both_sweeps(self, container):
        """Should register overflow and archive sweeps on the configured interval."""
        registry = JobRegistry()

        create_default_jobs(registry, container)

        jobs = {j.name: j for j in registry.list_jobs()}
        assert set(jobs) == {"overflow_sweep", "archive_sweep"}
        assert all(j.interval_seconds == 300.0 for j in jobs.values())

    def test_interval_override(self, container):
        registry = JobRegistry()

        create_default_jobs(registry, container, interval_seconds=5)

        assert registry.get("archive_sweep").interval_seconds == 5

    @pytest.mark.asyncio
    async def test_overflow_sweep_broadcasts_messages(self, container):
        """Should broadcast the sweep messages to the notify room."""
        registry = JobRegistry()
        create_default_jobs(registry, container)

        report = await registry.run_job("overflow_sweep")

        assert report.messages == ["too many cards"]
        container.broadcast_service.broadcast_all.assert_awaited_once_with(["too many cards"])

    @pytest.mark.asyncio
    async def test_archive_sweep_runs_archive_check(self, container):
        registry = JobRegistry()
        create_default_jobs(registry, container)

        await registry.run_job("archive_sweep")

        container.monitor_service.check_archive.assert_awaited_once()
        container.broadcast_service.broadcast_all.assert_awaited_once_with([])


class TestSweepScheduler:
    """Tests for SweepScheduler."""

    @pytest.fixture
    def registry(self):
        return JobRegistry()

    @pytest.fixture
    def scheduler(self, registry):
        return SweepScheduler(registry, timezone="UTC")

    def test_initial_state(self, scheduler, registry):
        """Should start in stopped state."""
        assert scheduler.is_running is False
        assert scheduler.registry is registry

    def test_pause_and_resume(self, scheduler):
        scheduler.registry.register(name="test", func=noop, interval_seconds=60)

        assert scheduler.pause_job("test") is True
        assert scheduler.registry.get("test").enabled is False
        assert scheduler.resume_job("test") is True
        assert scheduler.registry.get("test").enabled is True
        assert scheduler.resume_job("missing") is False

    @pytest.mark.asyncio
    async def test_run_job_now(self, scheduler):
        async def sweep():
            return "executed"

        scheduler.registry.register(name="test", func=sweep, interval_seconds=60)

        assert await scheduler.run_job_now("test") == "executed"

    def test_get_job_status(self, scheduler):
        """Should return job status without next run when stopped."""
        scheduler.registry.register(name="test", func=noop, interval_seconds=300, description="Test job")

        status = scheduler.get_job_status("test")

        assert status == {
            "name": "test",
            "description": "Test job",
            "interval_seconds": 300,
            "enabled": True,
            "last_run": None,
        }
        assert scheduler.get_job_status("nonexistent") is None

    @pytest.mark.asyncio
    async def test_start_schedules_enabled_jobs(self, scheduler, registry):
        """Should schedule enabled jobs with overlapping runs allowed."""
        registry.register(name="on", func=noop, interval_seconds=300)
        registry.register(name="off", func=noop, interval_seconds=300, enabled=False)

        scheduler.start()
        try:
            assert scheduler.is_running is True
            statuses = {s["name"]: s for s in scheduler.list_jobs()}
            assert statuses["on"]["next_run"] is not None
            assert "next_run" not in statuses["off"]

            apjob = scheduler._scheduler.get_job("on")
            assert apjob.max_instances == MAX_OVERLAPPING_RUNS
            assert apjob.coalesce is False
        finally:
            scheduler.stop()

        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_resume_schedules_job_disabled_at_start(self, scheduler, registry):
        """Should hand a job to APScheduler when it was off at start."""
        registry.register(name="off", func=noop, interval_seconds=300, enabled=False)

        scheduler.start()
        try:
            assert scheduler._scheduler.get_job("off") is None
            assert scheduler.resume_job("off") is True
            assert scheduler._scheduler.get_job("off") is not None
            assert scheduler.get_job_status("off")["next_run"] is not None
        finally:
            scheduler.stop()

    @pytest.mark.asyncio
    async def test_pause_while_running(self, scheduler, registry):
        registry.register(name="on", func=noop, interval_seconds=300)

        scheduler.start()
        try:
            assert scheduler.pause_job("on") is True
            assert scheduler.get_job_status("on")["next_run"] is None
        finally:
            scheduler.stop()

    @pytest.mark.asyncio
    async def test_paused_job_stays_off_after_restart(self, scheduler, registry):
        registry.register(name="on", func=noop, interval_seconds=300)
        scheduler.pause_job("on")

        scheduler.start()
        try:
            assert "next_run" not in scheduler.get_job_status("on")
        finally:
            scheduler.stop()

    @pytest.mark.asyncio
    async def test_pause_unknown_job(self, scheduler):
        scheduler.start()
        try:
            assert scheduler.pause_job("missing") is False
        finally:
            scheduler.stop()
