"""Tests for chat command dispatch."""

import pytest

from boardwatch.notifications.memory import InMemoryRoomSender
from boardwatch.parsers import DiscordWebhookParser, SlackWebhookParser
from boardwatch.policies.archive import ArchivePolicy
from boardwatch.services.broadcast_service import BroadcastService
from boardwatch.services.command_service import CommandService
from boardwatch.services.monitor_service import MonitorService
from boardwatch.services.notification_service import NotificationFeed


@pytest.fixture
def command_service(board_service, room_sender, clock) -> CommandService:
    monitor = MonitorService(
        board_service=board_service,
        broadcaster=BroadcastService(senders=[room_sender], room="ops"),
        archive_policy=ArchivePolicy(threshold_days=15, done_list_name="Done", clock=clock),
    )
    return CommandService(
        monitor,
        NotificationFeed(board_service),
        parsers=[SlackWebhookParser(), DiscordWebhookParser()],
    )


class TestCommandMatching:
    """Tests for normalize and match."""

    @pytest.mark.parametrize(
        "text,name",
        [
            ("trello boards", "boards"),
            ("Trello   Check Overflow", "check-overflow"),
            ("<@U123> trello check archive", "check-archive"),
            ("boardwatch: trello ping", "ping"),
            ("@boardwatch trello recent", "recent"),
        ],
    )
    def test_known_commands(self, command_service, text, name):
        assert command_service.match(text).name == name

    @pytest.mark.parametrize(
        "text",
        ["hello", "trello", "trello boards please", "please trello ping", ""],
    )
    def test_not_commands(self, command_service, text):
        assert command_service.match(text) is None

    def test_normalize(self, command_service):
        assert command_service.normalize("  <@!42>  Boardwatch,  trello   ping ") == "trello ping"

    def test_commands_listed(self, command_service):
        names = [c.name for c in command_service.commands]

        assert names == ["boards", "check-overflow", "check-archive", "ping", "recent"]
        assert all(c.help for c in command_service.commands)


class TestHandle:
    """Tests for handle."""

    @pytest.mark.asyncio
    async def test_non_command_returns_none(self, command_service, board_service):
        assert await command_service.handle("good morning") is None
        assert board_service.calls == []

    @pytest.mark.asyncio
    async def test_ping(self, command_service):
        assert await command_service.handle("trello ping") == ["trello PONG"]

    @pytest.mark.asyncio
    async def test_boards(self, command_service):
        replies = await command_service.handle("trello boards")

        assert replies == ["Board: Projects:\n -> Doing (3)\n -> Done"]

    @pytest.mark.asyncio
    async def test_check_overflow(self, command_service, room_sender):
        """Manual checks answer the invoker and do not broadcast."""
        replies = await command_service.handle("trello check overflow")

        assert len(replies) == 1
        assert replies[0].startswith("task overflow detected in Projects > Doing (3)")
        assert room_sender.sent == []

    @pytest.mark.asyncio
    async def test_check_archive(self, command_service, board_service):
        replies = await command_service.handle("trello check archive")

        assert len(replies) == 1
        assert "Task A" in replies[0]
        assert ("archive_card", "task-a") in board_service.calls

    @pytest.mark.asyncio
    async def test_errors_returned_to_invoker(self, command_service, board_service, room_sender):
        """Failures become ERROR lines in the reply."""
        board_service.fail_on("ping", message="unauthorized")

        replies = await command_service.handle("trello ping")

        assert replies == ["ERROR: ping failed: unauthorized"]
        assert room_sender.sent == []

    @pytest.mark.asyncio
    async def test_recent_empty(self, command_service):
        assert await command_service.handle("trello recent") == []


class TestProcessWebhook:
    """Tests for process_webhook."""

    @pytest.mark.asyncio
    async def test_slack_mention(self, command_service):
        payload = {
            "type": "event_callback",
            "event": {
                "type": "app_mention",
                "channel": "C123",
                "user": "U1",
                "text": "<@UBOT> trello ping",
                "ts": "1700000000.000100",
            },
        }

        message, replies = await command_service.process_webhook(payload)

        assert message.source_platform == "slack"
        assert message.channel_id == "C123"
        assert replies == ["trello PONG"]

    @pytest.mark.asyncio
    async def test_discord_message(self, command_service):
        payload = {
            "channel_id": "D9",
            "content": "trello ping",
            "author": {"id": "7", "username": "alice"},
            "timestamp": "2024-06-01T12:00:00Z",
        }

        message, replies = await command_service.process_webhook(payload)

        assert message.source_platform == "discord"
        assert message.user_name == "alice"
        assert replies == ["trello PONG"]

    @pytest.mark.asyncio
    async def test_bot_messages_ignored(self, command_service):
        payload = {
            "type": "event_callback",
            "event": {"type": "message", "bot_id": "B1", "text": "trello ping"},
        }

        assert await command_service.process_webhook(payload) is None

    @pytest.mark.asyncio
    async def test_chatter_ignored(self, command_service):
        payload = {"channel_id": "D9", "content": "lunch?", "author": {"id": "7"}}

        assert await command_service.process_webhook(payload) is None

    @pytest.mark.asyncio
    async def test_unknown_payload(self, command_service):
        assert await command_service.process_webhook({"foo": "bar"}) is None
