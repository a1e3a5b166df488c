"""CLI commands for the board monitor."""

import asyncio
import logging
from typing import Optional

import click

from ..container import configure_from_settings, get_container
from ..domain.models import BoardServiceError


def setup_logging(level: str) -> None:
    """Configure root logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_async(coro):
    """Run async coroutine in sync context."""
    return asyncio.run(coro)


class EchoErrors:
    """Error handler printing errors to stderr and counting them."""

    def __init__(self) -> None:
        self.count = 0

    async def __call__(self, error: BoardServiceError) -> None:
        self.count += 1
        click.echo(f"ERROR: {error}", err=True)


def echo_lines(lines: list[str], empty: str) -> None:
    if not lines:
        click.echo(empty)
        return
    for line in lines:
        click.echo(line)


@click.group()
@click.version_option(version="1.0.0")
@click.option("--log-level", default=None, help="Logging level (defaults to LOG_LEVEL)")
def cli(log_level: Optional[str]):
    """Trello board monitor."""
    container = configure_from_settings(get_container())
    setup_logging(log_level or container.settings.log_level)


@cli.command("boards")
def boards():
    """List boards with their lists."""
    errors = EchoErrors()
    lines = run_async(get_container().monitor_service.describe_boards(errors))
    echo_lines(lines, "No boards found.")


@cli.command("check-overflow")
@click.option("--broadcast", is_flag=True, help="Also send results to the notify room")
def check_overflow(broadcast: bool):
    """Report lists holding more cards than their capacity."""
    container = get_container()
    errors = EchoErrors()

    async def run():
        report = await container.monitor_service.check_overflow(errors)
        if broadcast:
            await container.broadcast_service.broadcast_all(report.messages)
        return report

    report = run_async(run())
    echo_lines(report.messages, "No overflow detected.")
    click.echo(
        f"Checked {report.boards_checked} board(s), {report.boards_failed} failed.",
        err=True,
    )


@cli.command("check-archive")
@click.option("--broadcast", is_flag=True, help="Also send results to the notify room")
def check_archive(broadcast: bool):
    """Archive cards idle in the done list."""
    container = get_container()
    errors = EchoErrors()

    async def run():
        report = await container.monitor_service.check_archive(errors)
        if broadcast:
            await container.broadcast_service.broadcast_all(report.messages)
        return report

    report = run_async(run())
    echo_lines(report.messages, "Nothing to archive.")
    click.echo(
        f"Checked {report.boards_checked} board(s), {report.boards_failed} failed.",
        err=True,
    )


@cli.command("ping")
def ping():
    """Check Trello connectivity."""
    errors = EchoErrors()
    pong = run_async(get_container().monitor_service.ping(errors))
    if pong:
        click.echo(pong)
    else:
        raise SystemExit(1)


@cli.command("recent")
def recent():
    """Show recent unread notifications."""
    errors = EchoErrors()
    lines = run_async(get_container().notification_feed.fetch_recent(errors))
    echo_lines(lines, "No recent notifications.")


@cli.command("say")
@click.argument("text")
def say(text: str):
    """Run a chat command, e.g. "trello check overflow"."""
    replies = run_async(get_container().command_service.handle(text))
    if replies is None:
        click.echo(f"Unknown command: {text}", err=True)
        click.echo("Available commands:")
        for command in get_container().command_service.commands:
            click.echo(f"  - {command.pattern.pattern}: {command.help}")
        return
    echo_lines(replies, "(no reply)")


@cli.command("jobs")
def list_jobs():
    """List periodic sweeps."""
    jobs = get_container().scheduler.registry.list_jobs()

    click.echo("Periodic sweeps:\n")
    for job in jobs:
        status = "✅" if job.enabled else "⏸️"
        click.echo(f"{status} {job.name}")
        click.echo(f"   Every: {job.interval_seconds:g}s")
        click.echo(f"   Description: {job.description}")
        click.echo()


@cli.command("run-job")
@click.argument("job_name")
def run_job(job_name: str):
    """Run a periodic sweep immediately."""
    registry = get_container().scheduler.registry

    job = registry.get(job_name)
    if not job:
        click.echo(f"Job not found: {job_name}", err=True)
        click.echo("Available jobs:")
        for j in registry.list_jobs():
            click.echo(f"  - {j.name}: {j.description}")
        return

    click.echo(f"Running job: {job_name}...")
    report = run_async(registry.run_job(job_name))
    click.echo(f"✅ Job completed: {len(report.messages)} message(s)")


@cli.command("watch")
def watch():
    """Run the periodic sweeps until interrupted."""
    scheduler = get_container().scheduler

    async def run():
        scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.stop()

    click.echo("Watching boards, press Ctrl+C to stop")
    try:
        run_async(run())
    except KeyboardInterrupt:
        click.echo("Stopped")


@cli.command("serve")
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", default=None, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Start the API server (with the periodic sweeps)."""
    import uvicorn

    settings = get_container().settings
    host = host or settings.host
    port = port or settings.port

    click.echo(f"Starting server at http://{host}:{port}")
    click.echo("Press Ctrl+C to stop")

    uvicorn.run(
        "boardwatch.api.app:app",
        host=host,
        port=port,
        reload=reload,
    )


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
