"""Protocol definitions for dependency injection."""

from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable

from .models import (
    Board,
    BoardList,
    BoardNotification,
    BoardServiceError,
    ChatMessage,
    ServiceResult,
)


ErrorHandler = Callable[[BoardServiceError], Awaitable[None]]


@runtime_checkable
class BoardService(Protocol):
    """Protocol for the external board service."""

    async def list_boards(
        self, filter: Optional[str] = "pinned"
    ) -> ServiceResult[list[Board]]:
        """List the organization's boards (with their open lists)."""
        ...

    async def list_lists(
        self, board_id: str, include_cards: bool = True
    ) -> ServiceResult[list[BoardList]]:
        """List a board's open lists, with open cards when requested."""
        ...

    async def archive_card(self, card_id: str) -> ServiceResult[None]:
        """Close a card."""
        ...

    async def comment_on_card(self, card_id: str, text: str) -> ServiceResult[None]:
        """Add a comment to a card."""
        ...

    async def list_recent_notifications(
        self, query: dict
    ) -> ServiceResult[list[BoardNotification]]:
        """List member notifications, newest first."""
        ...

    async def ping(self) -> ServiceResult[None]:
        """Check that the service is reachable with our credentials."""
        ...


@runtime_checkable
class RoomSender(Protocol):
    """Protocol for broadcasting text to a chat room."""

    async def send_to_room(self, room: Optional[str], text: str) -> bool:
        """Send text to a room, return True if successful."""
        ...

    @property
    def channel_name(self) -> str:
        """Return the channel name this sender handles."""
        ...


@runtime_checkable
class WebhookParser(Protocol):
    """Protocol for parsing incoming chat webhooks."""

    def can_parse(self, payload: dict) -> bool:
        """Check if this parser can handle the payload."""
        ...

    def parse(self, payload: dict) -> ChatMessage:
        """Parse webhook payload into a ChatMessage."""
        ...

    @property
    def platform(self) -> str:
        """Return the platform name this parser handles."""
        ...
