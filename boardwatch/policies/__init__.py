"""Board policies."""

from .archive import ArchivePolicy
from .overflow import check_board_overflow, evaluate_overflow, parse_capacity

__all__ = [
    "ArchivePolicy",
    "check_board_overflow",
    "evaluate_overflow",
    "parse_capacity",
]
