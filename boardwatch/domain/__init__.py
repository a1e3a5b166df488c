"""Domain models and protocols."""

from .models import (
    Board,
    BoardList,
    Card,
    NotificationKind,
    BoardNotification,
    ChatMessage,
    BoardServiceError,
    ServiceResult,
    SweepState,
    SweepReport,
)
from .protocols import (
    BoardService,
    RoomSender,
    WebhookParser,
    ErrorHandler,
)

__all__ = [
    "Board",
    "BoardList",
    "Card",
    "NotificationKind",
    "BoardNotification",
    "ChatMessage",
    "BoardServiceError",
    "ServiceResult",
    "SweepState",
    "SweepReport",
    "BoardService",
    "RoomSender",
    "WebhookParser",
    "ErrorHandler",
]
