"""Stale card archival policy."""

import asyncio
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Union

from ..domain.models import Board, BoardList, Card
from ..domain.protocols import BoardService, ErrorHandler

logger = logging.getLogger(__name__)

DEFAULT_EXCLUSION_PATTERN = r"^(Lisez-moi|Read-me)"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ArchivePolicy:
    """Archive cards that sat untouched in the "done" list for too long.

    Only lists whose name is exactly ``done_list_name`` are considered.
    Cards already closed, or whose name matches ``exclusion_pattern``, are
    never archived.
    """

    def __init__(
        self,
        threshold_days: int = 15,
        done_list_name: str = "Terminé",
        exclusion_pattern: Union[str, re.Pattern] = DEFAULT_EXCLUSION_PATTERN,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize archive policy.

        Args:
            threshold_days: Days without activity before a card is archived
            done_list_name: Name of the list holding finished cards
            exclusion_pattern: Regex matched at the start of card names to skip
            clock: Returns the current aware datetime
        """
        self._threshold_days = threshold_days
        self._done_list_name = done_list_name
        self._exclusion = (
            exclusion_pattern
            if isinstance(exclusion_pattern, re.Pattern)
            else re.compile(exclusion_pattern)
        )
        self._clock = clock

    @property
    def threshold_days(self) -> int:
        return self._threshold_days

    @property
    def done_list_name(self) -> str:
        return self._done_list_name

    @property
    def comment_text(self) -> str:
        return f"This card has not been updated since {self._threshold_days} days, archived."

    def select_done_lists(self, lists: Iterable[BoardList]) -> list[BoardList]:
        """Lists whose name equals the done list name exactly."""
        return [lst for lst in lists if lst.name == self._done_list_name]

    def is_excluded(self, card: Card) -> bool:
        """Whether the card name matches the exclusion pattern."""
        return self._exclusion.match(card.name) is not None

    def select_candidates(self, board_list: BoardList) -> list[Card]:
        """Open, non-excluded cards of a list."""
        return [
            card
            for card in board_list.cards
            if not card.closed and not self.is_excluded(card)
        ]

    def is_stale(self, card: Card, now: Optional[datetime] = None) -> bool:
        """Whether the card has been inactive for at least the threshold."""
        now = now or self._clock()
        return now - card.date_last_activity >= timedelta(days=self._threshold_days)

    def stale_cards(
        self, lists: Iterable[BoardList], now: Optional[datetime] = None
    ) -> list[tuple[BoardList, Card]]:
        """Cards to archive, with the list they belong to.

        Closed cards are filtered out before staleness is checked.
        """
        now = now or self._clock()
        return [
            (board_list, card)
            for board_list in self.select_done_lists(lists)
            for card in self.select_candidates(board_list)
            if self.is_stale(card, now)
        ]

    def format_message(self, board: Board, board_list: BoardList, card: Card) -> str:
        return (
            f"card {board.name} > {board_list.name} > {card.name} is more than "
            f"{self._threshold_days} days old, archived {card.short_url}"
        )

    async def archive(
        self,
        board: Board,
        lists: Iterable[BoardList],
        service: BoardService,
        on_error: ErrorHandler,
    ) -> list[str]:
        """Archive the board's stale cards and comment on each.

        Cards are processed concurrently; for a given card the comment is
        only posted once the archive call succeeded. A card produces a
        message only when both calls succeed. Failures go to ``on_error``
        and never affect sibling cards.

        Args:
            board: Board snapshot
            lists: Lists of the board, with cards
            service: Board service used for the mutations
            on_error: Error handler for failed mutations

        Returns:
            One message per archived card, in list/card order
        """
        targets = self.stale_cards(lists)
        if not targets:
            return []

        results = await asyncio.gather(
            *(
                self._archive_card(board, board_list, card, service, on_error)
                for board_list, card in targets
            )
        )
        return [message for message in results if message is not None]

    async def _archive_card(
        self,
        board: Board,
        board_list: BoardList,
        card: Card,
        service: BoardService,
        on_error: ErrorHandler,
    ) -> Optional[str]:
        archived = await service.archive_card(card.id)
        if not archived.ok:
            await on_error(archived.error)
            return None

        commented = await service.comment_on_card(card.id, self.comment_text)
        if not commented.ok:
            await on_error(commented.error)
            return None

        logger.info(f"archived {card.name}")
        return self.format_message(board, board_list, card)
