"""Recent notification feed with last-seen tracking."""

import asyncio
from typing import Optional
import logging

from ..domain.models import BoardNotification, BoardServiceError, NotificationKind
from ..domain.protocols import BoardService, ErrorHandler
from .broadcast_service import BroadcastService

logger = logging.getLogger(__name__)


class LastSeenTracker:
    """Holds the ID of the newest notification already fetched.

    The value lives in memory only and starts unknown after a restart.
    """

    def __init__(self) -> None:
        self._last_id: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    def get(self) -> Optional[str]:
        return self._last_id

    def update(self, notification_id: Optional[str]) -> None:
        if notification_id:
            self._last_id = notification_id

    def reset(self) -> None:
        self._last_id = None


def format_notification(notification: BoardNotification) -> Optional[str]:
    """Render a notification as a chat line.

    Returns:
        The line, or None for unknown kinds and moves without destination
    """
    kind = notification.kind
    if kind is NotificationKind.CARD_MOVED:
        if notification.list_after is None:
            return None
        return (
            f"{notification.actor} moved card `{notification.card_name}` "
            f"from `{notification.list_before or '?'}` to `{notification.list_after}` "
            f"- {notification.card_url}"
        )
    if kind is NotificationKind.COMMENT_ADDED:
        return (
            f"{notification.actor} commented on card `{notification.card_name}`: "
            f"{notification.text} - {notification.card_url}"
        )
    if kind is NotificationKind.CARD_CREATED:
        return (
            f"{notification.actor} created card `{notification.card_name}` "
            f"- {notification.card_url}"
        )
    # Unknown kind, newer than this bot
    return None


class NotificationFeed:
    """Fetches unread notifications newer than the last one seen."""

    def __init__(
        self,
        board_service: BoardService,
        *,
        limit: int = 10,
        tracker: Optional[LastSeenTracker] = None,
        broadcaster: Optional[BroadcastService] = None,
    ):
        """Initialize notification feed.

        Args:
            board_service: Service to read notifications from
            limit: Maximum number of notifications per fetch
            tracker: Last-seen tracker (a fresh one by default)
            broadcaster: Announces fetch errors when no handler is supplied
        """
        self._service = board_service
        self._limit = limit
        self._tracker = tracker or LastSeenTracker()
        self._broadcaster = broadcaster

    @property
    def tracker(self) -> LastSeenTracker:
        return self._tracker

    @property
    def last_seen_id(self) -> Optional[str]:
        return self._tracker.get()

    def build_query(self) -> dict:
        """Build the notification query, bounded by the last seen ID."""
        query = {
            "filter": [kind.value for kind in NotificationKind],
            "read_filter": "unread",
            "limit": self._limit,
        }
        since = self._tracker.get()
        if since:
            query["since"] = since
        return query

    async def default_error_handler(self, error: BoardServiceError) -> None:
        """Log the error and announce it in the notify room when possible."""
        if self._broadcaster is not None:
            await self._broadcaster.report_error(error)
        else:
            logger.error(str(error))

    async def fetch_recent(self, on_error: Optional[ErrorHandler] = None) -> list[str]:
        """Fetch recent notifications as chat lines.

        The last seen ID moves to the newest notification returned by the
        board service, even when its kind is filtered out here. The service
        drops payloads without an ID, so when the newest raw item is
        malformed the ID lands on the newest well-formed one; the malformed
        item has no ID to resume from anyway.

        Args:
            on_error: Handler for a failed fetch, defaults to logging and
                broadcasting

        Returns:
            One line per recognized notification, newest first
        """
        async with self._tracker.lock:
            result = await self._service.list_recent_notifications(self.build_query())
            notifications = (result.value or []) if result.ok else []
            if notifications:
                self._tracker.update(notifications[0].id)

        if not result.ok:
            await (on_error or self.default_error_handler)(result.error)
            return []

        lines = [
            line
            for notification in notifications
            if (line := format_notification(notification)) is not None
        ]
        logger.debug(
            f"Fetched {len(notifications)} notifications, {len(lines)} announced"
        )
        return lines
