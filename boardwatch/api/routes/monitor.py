"""Board monitor routes."""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ...domain.models import BoardServiceError, SweepReport
from ...container import get_container

router = APIRouter(prefix="/monitor", tags=["monitor"])


class MessagesResponse(BaseModel):
    """Lines produced by a manual check."""

    messages: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class SweepResponse(MessagesResponse):
    """Result of a manual sweep."""

    policy: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    boards_checked: int = 0
    boards_failed: int = 0

    @classmethod
    def from_report(cls, report: SweepReport, errors: list[str]) -> "SweepResponse":
        return cls(
            policy=report.policy,
            started_at=report.started_at,
            finished_at=report.finished_at,
            boards_checked=report.boards_checked,
            boards_failed=report.boards_failed,
            messages=report.messages,
            errors=errors,
        )


class ErrorCollector:
    """Error handler that keeps errors for the HTTP response."""

    def __init__(self) -> None:
        self.errors: list[str] = []

    async def __call__(self, error: BoardServiceError) -> None:
        self.errors.append(str(error))


@router.get("/boards", response_model=MessagesResponse)
async def list_boards() -> MessagesResponse:
    """Describe every board with its lists."""
    collector = ErrorCollector()
    lines = await get_container().monitor_service.describe_boards(collector)
    return MessagesResponse(messages=lines, errors=collector.errors)


@router.post("/overflow", response_model=SweepResponse)
async def check_overflow() -> SweepResponse:
    """Run an overflow check now."""
    collector = ErrorCollector()
    report = await get_container().monitor_service.check_overflow(collector)
    return SweepResponse.from_report(report, collector.errors)


@router.post("/archive", response_model=SweepResponse)
async def check_archive() -> SweepResponse:
    """Run an archive sweep now."""
    collector = ErrorCollector()
    report = await get_container().monitor_service.check_archive(collector)
    return SweepResponse.from_report(report, collector.errors)


@router.get("/notifications/recent", response_model=MessagesResponse)
async def recent_notifications() -> MessagesResponse:
    """Fetch notifications newer than the last fetch."""
    collector = ErrorCollector()
    lines = await get_container().notification_feed.fetch_recent(collector)
    return MessagesResponse(messages=lines, errors=collector.errors)


@router.get("/jobs")
async def list_jobs() -> list[dict]:
    """List the periodic sweeps and their status."""
    return get_container().scheduler.list_jobs()


@router.post("/jobs/{name}/pause")
async def pause_job(name: str) -> dict:
    """Stop a periodic sweep until it is resumed."""
    scheduler = get_container().scheduler
    if not scheduler.pause_job(name):
        raise HTTPException(404, f"Job not found: {name}")
    return scheduler.get_job_status(name)


@router.post("/jobs/{name}/resume")
async def resume_job(name: str) -> dict:
    """Put a paused sweep back on its interval."""
    scheduler = get_container().scheduler
    if not scheduler.resume_job(name):
        raise HTTPException(404, f"Job not found: {name}")
    return scheduler.get_job_status(name)


@router.post("/jobs/{name}/run", response_model=SweepResponse)
async def run_job(name: str) -> SweepResponse:
    """Run a periodic sweep now.

    The run behaves like a scheduled one: messages and errors are broadcast
    to the notify room.
    """
    scheduler = get_container().scheduler
    if scheduler.get_job_status(name) is None:
        raise HTTPException(404, f"Job not found: {name}")
    report = await scheduler.run_job_now(name)
    return SweepResponse.from_report(report, [])
