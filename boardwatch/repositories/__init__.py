"""Board service implementations."""

from .memory import InMemoryBoardService
from .trello import TrelloBoardService

__all__ = [
    "InMemoryBoardService",
    "TrelloBoardService",
]
