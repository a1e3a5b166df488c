"""Domain models for the board monitor."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Card:
    """A unit of work inside a list."""

    id: str
    name: str
    date_last_activity: datetime
    closed: bool = False
    short_url: str = ""
    list_id: str = ""


@dataclass(frozen=True)
class BoardList:
    """An ordered column of cards within a board.

    The name may encode a capacity as a trailing "(n)", e.g. "Doing (5)".
    """

    id: str
    name: str
    cards: tuple[Card, ...] = ()
    board_id: str = ""

    @property
    def open_cards(self) -> list[Card]:
        """Cards that are not closed."""
        return [card for card in self.cards if not card.closed]


@dataclass(frozen=True)
class Board:
    """A read-only snapshot of a board taken during one sweep."""

    id: str
    name: str
    lists: tuple[BoardList, ...] = ()

    @property
    def url(self) -> str:
        return f"https://trello.com/board/{self.id}"


class NotificationKind(Enum):
    """Notification types the bot knows how to announce."""

    CARD_MOVED = "changeCard"
    COMMENT_ADDED = "commentCard"
    CARD_CREATED = "createdCard"

    @classmethod
    def parse(cls, raw_type: Optional[str]) -> Optional["NotificationKind"]:
        """Return the matching kind, or None for types we don't handle."""
        try:
            return cls(raw_type)
        except ValueError:
            return None


@dataclass(frozen=True)
class BoardNotification:
    """An entry of the member notification feed."""

    id: str
    raw_type: str
    kind: Optional[NotificationKind]
    actor: str = ""
    card_name: str = ""
    card_url: str = ""
    text: str = ""
    list_before: Optional[str] = None
    list_after: Optional[str] = None


@dataclass(frozen=True)
class ChatMessage:
    """A parsed incoming chat message from Slack/Discord."""

    source_platform: str  # "slack" or "discord"
    channel_id: str
    user_id: str
    user_name: str
    text: str
    timestamp: datetime
    raw_payload: dict = field(default_factory=dict)


class BoardServiceError(Exception):
    """A failed call to the board service (transport, auth or HTTP status)."""

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.operation} failed ({self.status_code}): {self.message}"
        return f"{self.operation} failed: {self.message}"


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Tagged result of a board service call.

    Exactly one of ``value`` (on success) or ``error`` is meaningful.
    """

    value: Optional[T] = None
    error: Optional[BoardServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BoardServiceError) -> "ServiceResult[T]":
        return cls(error=error)


class SweepState(Enum):
    """Lifecycle of a single sweep."""

    IDLE = "idle"
    FETCHING = "fetching"
    EVALUATING = "evaluating"


@dataclass
class SweepReport:
    """Outcome of one fetch-and-evaluate cycle for a policy."""

    policy: str
    started_at: datetime
    state: SweepState = SweepState.IDLE
    finished_at: Optional[datetime] = None
    boards_checked: int = 0
    boards_failed: int = 0
    messages: list[str] = field(default_factory=list)
