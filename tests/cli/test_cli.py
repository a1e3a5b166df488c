"""Tests for CLI commands."""

import pytest
from click.testing import CliRunner
from unittest.mock import patch

from boardwatch.cli.main import cli
from boardwatch.container import get_container, reset_container
from boardwatch.domain.models import BoardNotification, NotificationKind


@pytest.fixture(autouse=True)
def setup_container(board_service, room_sender, monkeypatch):
    """Set up container for each test."""
    monkeypatch.setenv("MONITOR_DONE_LIST_NAME", "Done")
    monkeypatch.setenv("MONITOR_NOTIFY_ROOM", "ops")
    reset_container()
    container = get_container()
    container.configure_board_service(lambda: board_service)
    container.add_room_sender(lambda: room_sender)
    yield container
    reset_container()


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


class TestBoardsCommand:
    """Tests for boards command."""

    def test_lists_boards(self, runner):
        result = runner.invoke(cli, ["boards"])

        assert result.exit_code == 0
        assert "Board: Projects:" in result.output
        assert " -> Doing (3)" in result.output

    def test_no_boards(self, runner, board_service):
        board_service.fail_on("list_boards", message="unauthorized")

        result = runner.invoke(cli, ["boards"])

        assert result.exit_code == 0
        assert "No boards found." in result.output
        assert "ERROR: list_boards failed: unauthorized" in result.output


class TestCheckCommands:
    """Tests for check-overflow and check-archive."""

    def test_check_overflow(self, runner, room_sender):
        """Should print overflow messages without broadcasting."""
        result = runner.invoke(cli, ["check-overflow"])

        assert result.exit_code == 0
        assert "task overflow detected in Projects > Doing (3): 4/3" in result.output
        assert "Checked 1 board(s), 0 failed." in result.output
        assert room_sender.sent == []

    def test_check_overflow_broadcast(self, runner, room_sender):
        result = runner.invoke(cli, ["check-overflow", "--broadcast"])

        assert result.exit_code == 0
        assert len(room_sender.messages("ops")) == 1

    def test_check_archive(self, runner, board_service):
        result = runner.invoke(cli, ["check-archive"])

        assert result.exit_code == 0
        assert "Task A" in result.output
        assert ("archive_card", "task-a") in board_service.calls

    def test_nothing_to_archive(self, runner):
        runner.invoke(cli, ["check-archive"])

        result = runner.invoke(cli, ["check-archive"])

        assert "Nothing to archive." in result.output


class TestPingCommand:
    """Tests for ping command."""

    def test_ping(self, runner):
        result = runner.invoke(cli, ["ping"])

        assert result.exit_code == 0
        assert "trello PONG" in result.output

    def test_ping_failure(self, runner, board_service):
        board_service.fail_on("ping", message="down")

        result = runner.invoke(cli, ["ping"])

        assert result.exit_code == 1
        assert "ERROR: ping failed: down" in result.output


class TestRecentCommand:
    """Tests for recent command."""

    def test_no_notifications(self, runner):
        result = runner.invoke(cli, ["recent"])

        assert "No recent notifications." in result.output

    def test_prints_notifications(self, runner, board_service):
        board_service.add_notification(
            BoardNotification(
                id="n1",
                raw_type="commentCard",
                kind=NotificationKind.COMMENT_ADDED,
                actor="bob",
                card_name="Task B",
                card_url="https://trello.com/c/b",
                text="LGTM",
            )
        )

        result = runner.invoke(cli, ["recent"])

        assert "bob commented on card `Task B`: LGTM" in result.output


class TestSayCommand:
    """Tests for say command."""

    def test_runs_chat_command(self, runner):
        result = runner.invoke(cli, ["say", "trello ping"])

        assert result.exit_code == 0
        assert "trello PONG" in result.output

    def test_unknown_command(self, runner):
        result = runner.invoke(cli, ["say", "hello"])

        assert "Unknown command: hello" in result.output
        assert "trello check overflow" in result.output


class TestJobCommands:
    """Tests for jobs and run-job commands."""

    def test_list_jobs(self, runner):
        result = runner.invoke(cli, ["jobs"])

        assert result.exit_code == 0
        assert "overflow_sweep" in result.output
        assert "archive_sweep" in result.output
        assert "Every: 300s" in result.output

    def test_run_job(self, runner, room_sender):
        """Should run the sweep and broadcast its messages."""
        result = runner.invoke(cli, ["run-job", "overflow_sweep"])

        assert result.exit_code == 0
        assert "Job completed: 1 message(s)" in result.output
        assert len(room_sender.messages("ops")) == 1

    def test_run_unknown_job(self, runner):
        result = runner.invoke(cli, ["run-job", "nope"])

        assert "Job not found: nope" in result.output
        assert "overflow_sweep" in result.output


class TestServeCommand:
    """Tests for serve command."""

    def test_starts_uvicorn(self, runner):
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(cli, ["serve", "--port", "9000"])

        assert result.exit_code == 0
        assert mock_run.call_args.args[0] == "boardwatch.api.app:app"
        assert mock_run.call_args.kwargs["port"] == 9000
