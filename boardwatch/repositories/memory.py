"""In-memory board service for development and testing."""

from dataclasses import replace
from typing import Optional

from boardwatch.domain.models import (
    Board,
    BoardList,
    BoardNotification,
    BoardServiceError,
    ServiceResult,
)


class InMemoryBoardService:
    """In-memory implementation of BoardService.

    Boards are stored with their lists and cards. Individual operations can
    be made to fail with ``fail_on`` to exercise partial-failure handling.
    Every call is recorded in ``calls`` as ``(operation, argument)``.
    """

    def __init__(
        self,
        boards: Optional[list[Board]] = None,
        notifications: Optional[list[BoardNotification]] = None,
    ) -> None:
        self._boards: dict[str, Board] = {b.id: b for b in boards or []}
        self._pinned: set[str] = set(self._boards)
        self._notifications: list[BoardNotification] = list(notifications or [])
        self._failures: dict[tuple[str, Optional[str]], BoardServiceError] = {}
        self.calls: list[tuple[str, Optional[str]]] = []
        self.comments: dict[str, list[str]] = {}

    def add_board(self, board: Board, pinned: bool = True) -> None:
        """Add or replace a board."""
        self._boards[board.id] = board
        if pinned:
            self._pinned.add(board.id)
        else:
            self._pinned.discard(board.id)

    def add_notification(self, notification: BoardNotification) -> None:
        """Add a notification at the top of the feed."""
        self._notifications.insert(0, notification)

    def fail_on(
        self,
        operation: str,
        key: Optional[str] = None,
        message: str = "simulated failure",
    ) -> None:
        """Make an operation fail.

        Args:
            operation: One of list_boards, list_lists, archive_card,
                comment_on_card, list_recent_notifications, ping
            key: Board or card ID the failure applies to (None = any)
            message: Error message
        """
        self._failures[(operation, key)] = BoardServiceError(operation, message)

    def clear_failures(self) -> None:
        self._failures.clear()

    def get_board(self, board_id: str) -> Optional[Board]:
        return self._boards.get(board_id)

    def _failure(self, operation: str, key: Optional[str] = None) -> Optional[BoardServiceError]:
        self.calls.append((operation, key))
        return self._failures.get((operation, key)) or self._failures.get((operation, None))

    async def list_boards(
        self, filter: Optional[str] = "pinned"
    ) -> ServiceResult[list[Board]]:
        """List boards; "pinned" restricts to pinned boards."""
        error = self._failure("list_boards")
        if error:
            return ServiceResult.failure(error)

        boards = list(self._boards.values())
        if filter == "pinned":
            boards = [b for b in boards if b.id in self._pinned]
        return ServiceResult.success(boards)

    async def list_lists(
        self, board_id: str, include_cards: bool = True
    ) -> ServiceResult[list[BoardList]]:
        """List a board's lists, with open cards when requested."""
        error = self._failure("list_lists", board_id)
        if error:
            return ServiceResult.failure(error)

        board = self._boards.get(board_id)
        if board is None:
            return ServiceResult.failure(
                BoardServiceError("list_lists", f"board {board_id} not found", 404)
            )

        lists = [
            replace(
                board_list,
                cards=tuple(c for c in board_list.cards if not c.closed) if include_cards else (),
            )
            for board_list in board.lists
        ]
        return ServiceResult.success(lists)

    async def archive_card(self, card_id: str) -> ServiceResult[None]:
        """Close a card in whichever board holds it."""
        error = self._failure("archive_card", card_id)
        if error:
            return ServiceResult.failure(error)

        for board in self._boards.values():
            lists = tuple(
                replace(
                    board_list,
                    cards=tuple(
                        replace(card, closed=True) if card.id == card_id else card
                        for card in board_list.cards
                    ),
                )
                for board_list in board.lists
            )
            self._boards[board.id] = replace(board, lists=lists)
        return ServiceResult.success(None)

    async def comment_on_card(self, card_id: str, text: str) -> ServiceResult[None]:
        """Record a comment on a card."""
        error = self._failure("comment_on_card", card_id)
        if error:
            return ServiceResult.failure(error)

        self.comments.setdefault(card_id, []).append(text)
        return ServiceResult.success(None)

    async def list_recent_notifications(
        self, query: dict
    ) -> ServiceResult[list[BoardNotification]]:
        """Return notifications newer than ``query["since"]``, newest first."""
        error = self._failure("list_recent_notifications")
        if error:
            return ServiceResult.failure(error)

        notifications = self._notifications
        since = query.get("since")
        if since is not None:
            ids = [n.id for n in notifications]
            if since in ids:
                notifications = notifications[: ids.index(since)]

        limit = query.get("limit")
        if limit:
            notifications = notifications[:limit]
        return ServiceResult.success(list(notifications))

    async def ping(self) -> ServiceResult[None]:
        error = self._failure("ping")
        if error:
            return ServiceResult.failure(error)
        return ServiceResult.success(None)
