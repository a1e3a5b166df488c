"""Shared pytest fixtures."""

import pytest
from datetime import datetime, timedelta, timezone

from boardwatch.domain.models import Board, BoardList, Card
from boardwatch.notifications.memory import InMemoryRoomSender
from boardwatch.repositories.memory import InMemoryBoardService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_card(
    card_id: str,
    name: str = "Card",
    days_idle: float = 0,
    closed: bool = False,
) -> Card:
    """Build a card last active ``days_idle`` days before NOW."""
    return Card(
        id=card_id,
        name=name,
        date_last_activity=NOW - timedelta(days=days_idle),
        closed=closed,
        short_url=f"https://trello.com/c/{card_id}",
    )


def make_list(list_id: str, name: str, cards=(), board_id: str = "") -> BoardList:
    return BoardList(id=list_id, name=name, cards=tuple(cards), board_id=board_id)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def sample_board() -> Board:
    """Board with an overflowing list and a done list holding a stale card."""
    return Board(
        id="board-1",
        name="Projects",
        lists=(
            make_list(
                "list-doing",
                "Doing (3)",
                [make_card(f"d{i}", f"Doing {i}") for i in range(4)],
                "board-1",
            ),
            make_list(
                "list-done",
                "Done",
                [make_card("task-a", "Task A", days_idle=20)],
                "board-1",
            ),
        ),
    )


@pytest.fixture
def board_service(sample_board) -> InMemoryBoardService:
    return InMemoryBoardService(boards=[sample_board])


@pytest.fixture
def room_sender() -> InMemoryRoomSender:
    return InMemoryRoomSender()
