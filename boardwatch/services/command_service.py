"""Chat command dispatch."""

import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence
import logging

from ..domain.models import BoardServiceError, ChatMessage
from ..domain.protocols import ErrorHandler, WebhookParser
from .monitor_service import MonitorService
from .notification_service import NotificationFeed

logger = logging.getLogger(__name__)

CommandHandler = Callable[[ErrorHandler], Awaitable[list[str]]]


@dataclass(frozen=True)
class Command:
    """A chat command the bot responds to."""

    name: str
    pattern: re.Pattern
    handler: CommandHandler
    help: str = ""


class CommandService:
    """Matches chat text against known commands and runs them.

    Replies go back to the invoking conversation; failures are returned as
    "ERROR: ..." lines instead of being broadcast.
    """

    def __init__(
        self,
        monitor: MonitorService,
        feed: NotificationFeed,
        *,
        bot_name: str = "boardwatch",
        parsers: Sequence[WebhookParser] = (),
    ) -> None:
        self._monitor = monitor
        self._feed = feed
        self._bot_name = bot_name
        self._parsers = {p.platform: p for p in parsers}
        self._commands = [
            self._command("boards", r"trello boards", self._boards, "List boards and their lists"),
            self._command("check-overflow", r"trello check overflow", self._check_overflow, "Check list capacities"),
            self._command("check-archive", r"trello check archive", self._check_archive, "Archive stale done cards"),
            self._command("ping", r"trello ping", self._ping, "Check Trello connectivity"),
            self._command("recent", r"trello recent", self._recent, "Show recent notifications"),
        ]

    @staticmethod
    def _command(name: str, pattern: str, handler: CommandHandler, help: str) -> Command:
        return Command(name, re.compile(pattern, re.IGNORECASE), handler, help)

    @property
    def commands(self) -> list[Command]:
        return list(self._commands)

    def get_parser(self, payload: dict) -> Optional[WebhookParser]:
        """Find a parser that can handle the payload."""
        for parser in self._parsers.values():
            if parser.can_parse(payload):
                return parser
        return None

    def normalize(self, text: str) -> str:
        """Strip chat mentions, the bot name prefix and surrounding spaces."""
        text = re.sub(r"<@!?\w+>", "", text or "")  # Slack/Discord mentions
        text = text.strip()
        text = re.sub(
            rf"^@?{re.escape(self._bot_name)}[:,]?\s+", "", text, flags=re.IGNORECASE
        )
        return " ".join(text.split())

    def match(self, text: str) -> Optional[Command]:
        """Find the command the text invokes."""
        normalized = self.normalize(text)
        for command in self._commands:
            if command.pattern.fullmatch(normalized):
                return command
        return None

    async def handle(self, text: str) -> Optional[list[str]]:
        """Run the command contained in a chat message.

        Args:
            text: Raw message text

        Returns:
            Reply lines, or None if the text is not a command
        """
        command = self.match(text)
        if command is None:
            return None

        errors: list[str] = []

        async def reply_error(error: BoardServiceError) -> None:
            logger.error(f"{command.name}: {error}")
            errors.append(f"ERROR: {error}")

        logger.info(f"Running command {command.name}")
        lines = await command.handler(reply_error)
        return lines + errors

    async def handle_message(self, message: ChatMessage) -> Optional[list[str]]:
        """Run the command contained in a parsed chat message."""
        return await self.handle(message.text)

    async def process_webhook(self, payload: dict) -> Optional[tuple[ChatMessage, list[str]]]:
        """Parse a chat webhook payload and run its command.

        Returns:
            The message and its replies, or None if nothing was run
        """
        parser = self.get_parser(payload)
        if not parser:
            return None

        message = parser.parse(payload)
        replies = await self.handle_message(message)
        if replies is None:
            return None
        return message, replies

    async def _boards(self, on_error: ErrorHandler) -> list[str]:
        return await self._monitor.describe_boards(on_error)

    async def _check_overflow(self, on_error: ErrorHandler) -> list[str]:
        report = await self._monitor.check_overflow(on_error)
        return report.messages

    async def _check_archive(self, on_error: ErrorHandler) -> list[str]:
        report = await self._monitor.check_archive(on_error)
        return report.messages

    async def _ping(self, on_error: ErrorHandler) -> list[str]:
        pong = await self._monitor.ping(on_error)
        return [pong] if pong else []

    async def _recent(self, on_error: ErrorHandler) -> list[str]:
        return await self._feed.fetch_recent(on_error)
