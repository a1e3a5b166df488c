"""Board monitor: overflow and archive sweeps across every board."""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional
import logging

from ..domain.models import (
    Board,
    BoardList,
    BoardServiceError,
    SweepReport,
    SweepState,
)
from ..domain.protocols import BoardService, ErrorHandler
from ..policies.archive import ArchivePolicy
from ..policies.overflow import check_board_overflow
from .broadcast_service import BroadcastService

logger = logging.getLogger(__name__)

BoardEvaluator = Callable[[Board, list[BoardList], ErrorHandler], Awaitable[list[str]]]


class MonitorService:
    """Runs policy sweeps over the organization's boards.

    Every sweep works on its own freshly fetched snapshot, so sweeps of the
    same or different policies may overlap. A board whose lists cannot be
    fetched is reported and skipped; the other boards are still evaluated.
    """

    OVERFLOW = "overflow"
    ARCHIVE = "archive"

    def __init__(
        self,
        board_service: BoardService,
        broadcaster: BroadcastService,
        archive_policy: ArchivePolicy,
        *,
        board_filter: Optional[str] = "pinned",
    ):
        """Initialize monitor service.

        Args:
            board_service: External board service
            broadcaster: Broadcasts errors when no handler is supplied
            archive_policy: Policy used by archive sweeps
            board_filter: Board filter used by sweeps
        """
        self._service = board_service
        self._broadcaster = broadcaster
        self._archive_policy = archive_policy
        self._board_filter = board_filter

    @property
    def archive_policy(self) -> ArchivePolicy:
        return self._archive_policy

    async def default_error_handler(self, error: BoardServiceError) -> None:
        """Log the error and announce it in the notify room."""
        await self._broadcaster.report_error(error)

    async def check_overflow(self, on_error: Optional[ErrorHandler] = None) -> SweepReport:
        """Report every list holding more open cards than its capacity.

        Args:
            on_error: Error handler, defaults to logging and broadcasting

        Returns:
            Sweep report with one message per overflowing list
        """

        async def evaluate(board, lists, handler):
            return check_board_overflow(board, lists)

        return await self._sweep(self.OVERFLOW, evaluate, on_error)

    async def check_archive(self, on_error: Optional[ErrorHandler] = None) -> SweepReport:
        """Archive stale cards of every board's done list.

        Args:
            on_error: Error handler, defaults to logging and broadcasting

        Returns:
            Sweep report with one message per archived card
        """

        async def evaluate(board, lists, handler):
            return await self._archive_policy.archive(board, lists, self._service, handler)

        return await self._sweep(self.ARCHIVE, evaluate, on_error)

    async def describe_boards(self, on_error: Optional[ErrorHandler] = None) -> list[str]:
        """Describe every organization board with its open lists."""
        handler = on_error or self.default_error_handler
        result = await self._service.list_boards(filter=None)
        if not result.ok:
            await handler(result.error)
            return []
        return [format_board(board) for board in result.value or []]

    async def ping(self, on_error: Optional[ErrorHandler] = None) -> Optional[str]:
        """Check connectivity with the board service."""
        handler = on_error or self.default_error_handler
        result = await self._service.ping()
        if not result.ok:
            await handler(result.error)
            return None
        return "trello PONG"

    async def _sweep(
        self,
        policy: str,
        evaluate: BoardEvaluator,
        on_error: Optional[ErrorHandler],
    ) -> SweepReport:
        """Fetch boards, evaluate each concurrently, and collect messages."""
        handler = on_error or self.default_error_handler
        report = SweepReport(policy=policy, started_at=datetime.now(timezone.utc))

        self._transition(report, SweepState.FETCHING)
        boards_result = await self._service.list_boards(filter=self._board_filter)
        if not boards_result.ok:
            await handler(boards_result.error)
            return self._finish(report)

        boards = boards_result.value or []
        outcomes = await asyncio.gather(
            *(self._check_board(board, evaluate, handler, report) for board in boards),
            return_exceptions=True,
        )

        for board, outcome in zip(boards, outcomes):
            if isinstance(outcome, BaseException):
                # Unexpected failure inside a policy; the other boards are kept.
                logger.exception(
                    f"{policy} sweep failed on board {board.name}", exc_info=outcome
                )
                report.boards_failed += 1
                await handler(BoardServiceError(f"{policy} sweep of {board.name}", str(outcome)))
            elif outcome is None:
                report.boards_failed += 1
            else:
                report.boards_checked += 1
                report.messages.extend(outcome)

        return self._finish(report)

    async def _check_board(
        self,
        board: Board,
        evaluate: BoardEvaluator,
        handler: ErrorHandler,
        report: SweepReport,
    ) -> Optional[list[str]]:
        """Fetch one board's lists and evaluate them.

        Returns:
            Messages for the board, or None if its lists could not be fetched
        """
        lists_result = await self._service.list_lists(board.id, include_cards=True)
        if not lists_result.ok:
            await handler(lists_result.error)
            return None

        if report.state is SweepState.FETCHING:
            self._transition(report, SweepState.EVALUATING)
        return await evaluate(board, lists_result.value or [], handler)

    def _transition(self, report: SweepReport, state: SweepState) -> None:
        logger.debug(f"{report.policy} sweep: {report.state.value} -> {state.value}")
        report.state = state

    def _finish(self, report: SweepReport) -> SweepReport:
        self._transition(report, SweepState.IDLE)
        report.finished_at = datetime.now(timezone.utc)
        logger.info(
            f"{report.policy} sweep done: {report.boards_checked} boards checked, "
            f"{report.boards_failed} failed, {len(report.messages)} messages"
        )
        return report


def format_board(board: Board, sep: str = "\n -> ") -> str:
    """Format a board and its list names, one per line."""
    return f"Board: {board.name}:{sep}{sep.join(lst.name for lst in board.lists)}"
