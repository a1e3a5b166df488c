"""Room sender implementations."""

from .discord_sender import DiscordRoomSender
from .slack_sender import SlackRoomSender
from .memory import InMemoryRoomSender, LoggingRoomSender

__all__ = [
    "DiscordRoomSender",
    "SlackRoomSender",
    "InMemoryRoomSender",
    "LoggingRoomSender",
]
