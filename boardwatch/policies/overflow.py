"""List capacity (overflow) policy."""

import re
from typing import Iterable, Optional

from ..domain.models import Board, BoardList

# "(n)" at the very end of the name; \Z so a trailing newline does not match.
CAPACITY_PATTERN = re.compile(r"\((\d+)\)\Z", re.ASCII)


def parse_capacity(name: str) -> int:
    """Parse the capacity encoded in a list name.

    Only a parenthesised run of digits at the very end of the name counts,
    so "Doing (5)" has capacity 5, "Doing (2) (5)" has capacity 5, while
    "Doing (5) " and "Doing" have capacity 0. Capacity 0 means the list is
    exempt from overflow checks.

    Args:
        name: List name

    Returns:
        Non-negative capacity
    """
    match = CAPACITY_PATTERN.search(name or "")
    if not match:
        return 0
    return int(match.group(1))


def evaluate_overflow(board: Board, board_list: BoardList) -> Optional[str]:
    """Check one list against its capacity.

    Returns:
        Overflow message, or None when the list is exempt or within capacity
    """
    capacity = parse_capacity(board_list.name)
    if not capacity:
        return None

    count = len(board_list.open_cards)
    if count <= capacity:
        return None

    return (
        f"task overflow detected in {board.name} > {board_list.name}: "
        f"{count}/{capacity} {board.url}"
    )


def check_board_overflow(board: Board, lists: Iterable[BoardList]) -> list[str]:
    """Evaluate every list of a board, in list order."""
    return [
        message
        for board_list in lists
        if (message := evaluate_overflow(board, board_list)) is not None
    ]
