"""Service layer implementations."""

from .broadcast_service import BroadcastService
from .command_service import CommandService
from .monitor_service import MonitorService
from .notification_service import LastSeenTracker, NotificationFeed

__all__ = [
    "BroadcastService",
    "CommandService",
    "MonitorService",
    "LastSeenTracker",
    "NotificationFeed",
]
