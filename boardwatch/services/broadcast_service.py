"""Broadcast service for publishing messages to the notify room."""

from typing import Optional, Sequence
import logging

from ..domain.models import BoardServiceError
from ..domain.protocols import RoomSender

logger = logging.getLogger(__name__)


class BroadcastService:
    """Sends text to the configured room through every registered sender."""

    def __init__(
        self,
        senders: Sequence[RoomSender],
        room: Optional[str] = None,
    ):
        """Initialize broadcast service.

        Args:
            senders: Room senders to publish through
            room: Room that receives monitor output and errors
        """
        self._senders = list(senders)
        self._room = room

    @property
    def room(self) -> Optional[str]:
        return self._room

    @property
    def senders(self) -> list[RoomSender]:
        """Get list of registered senders."""
        return self._senders

    def add_sender(self, sender: RoomSender) -> None:
        """Add a room sender.

        Args:
            sender: Sender to add
        """
        self._senders.append(sender)

    def remove_sender(self, channel_name: str) -> bool:
        """Remove a sender by channel name.

        Args:
            channel_name: Name of the channel to remove

        Returns:
            True if removed, False if not found
        """
        for i, sender in enumerate(self._senders):
            if sender.channel_name == channel_name:
                del self._senders[i]
                return True
        return False

    async def broadcast(
        self,
        text: str,
        room: Optional[str] = None,
    ) -> dict[str, bool]:
        """Send text to a room on every sender.

        Args:
            text: Message text
            room: Target room, defaults to the configured room

        Returns:
            Dict mapping channel names to success status
        """
        target = room or self._room
        results = {}
        for sender in self._senders:
            results[sender.channel_name] = await sender.send_to_room(target, text)
        return results

    async def broadcast_all(self, messages: Sequence[str]) -> int:
        """Broadcast messages in order.

        Returns:
            Number of messages that reached at least one sender
        """
        delivered = 0
        for message in messages:
            results = await self.broadcast(message)
            if any(results.values()):
                delivered += 1
        return delivered

    async def reply(self, platform: str, channel: str, lines: Sequence[str]) -> int:
        """Answer in the conversation a command came from.

        Args:
            platform: Sender channel name matching the message platform
            channel: Channel the command was posted in
            lines: Reply lines

        Returns:
            Number of lines sent, 0 when no sender handles the platform
        """
        sender = next((s for s in self._senders if s.channel_name == platform), None)
        if sender is None:
            return 0

        sent = 0
        for line in lines:
            if await sender.send_to_room(channel, line):
                sent += 1
        return sent

    async def report_error(self, error: BoardServiceError) -> None:
        """Default error handler: log the error and announce it in the room."""
        logger.error(str(error))
        await self.broadcast(f"ERROR: {error}")
