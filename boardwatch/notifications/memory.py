"""Room senders that do not leave the process."""

from typing import Optional
import logging

logger = logging.getLogger(__name__)


class InMemoryRoomSender:
    """Records sent messages, for testing."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[Optional[str], str]] = []
        self.fail = fail

    @property
    def channel_name(self) -> str:
        return "memory"

    async def send_to_room(self, room: Optional[str], text: str) -> bool:
        if self.fail:
            return False
        self.sent.append((room, text))
        return True

    def messages(self, room: Optional[str] = None) -> list[str]:
        """Texts sent, optionally restricted to one room."""
        return [text for r, text in self.sent if room is None or r == room]


class LoggingRoomSender:
    """Writes room messages to the log when no chat sender is configured."""

    @property
    def channel_name(self) -> str:
        return "log"

    async def send_to_room(self, room: Optional[str], text: str) -> bool:
        logger.info(f"[{room or '-'}] {text}")
        return True
