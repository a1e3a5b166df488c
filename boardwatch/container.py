"""Dependency injection container."""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Callable, Optional, Any
import logging

from boardwatch.domain.protocols import BoardService, RoomSender

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Provider(Generic[T]):
    """Lazy provider that creates instance on first access."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._instance: Optional[T] = None

    def get(self) -> T:
        """Get the instance, creating it if necessary."""
        if self._instance is None:
            self._instance = self._factory()
        return self._instance

    def reset(self) -> None:
        """Reset the instance (for testing)."""
        self._instance = None

    def override(self, instance: T) -> None:
        """Override with a specific instance (for testing)."""
        self._instance = instance


@dataclass
class Container:
    """Dependency injection container.

    Services holding state (the notification feed and its last-seen ID)
    are created once and shared by every caller.
    """

    _board_service: Optional[Provider[BoardService]] = None
    _room_senders: list[Provider[RoomSender]] = field(default_factory=list)

    # Lazily built services
    _broadcast_service: Optional[Any] = None
    _notification_feed: Optional[Any] = None
    _monitor_service: Optional[Any] = None
    _command_service: Optional[Any] = None
    _scheduler: Optional[Any] = None

    # Settings cache
    _settings: Optional[Any] = None

    @property
    def is_configured(self) -> bool:
        return self._board_service is not None

    @property
    def board_service(self) -> BoardService:
        """Get the board service."""
        if self._board_service is None:
            raise RuntimeError("Board service not configured")
        return self._board_service.get()

    @property
    def room_senders(self) -> list[RoomSender]:
        """Get all room senders."""
        return [p.get() for p in self._room_senders]

    @property
    def settings(self) -> Any:
        """Get application settings."""
        if self._settings is None:
            from boardwatch.config.settings import get_settings

            self._settings = get_settings()
        return self._settings

    @property
    def broadcast_service(self) -> Any:
        """Get BroadcastService instance."""
        if self._broadcast_service is None:
            from boardwatch.services.broadcast_service import BroadcastService

            self._broadcast_service = BroadcastService(
                senders=self.room_senders,
                room=self.settings.monitor.notify_room,
            )
        return self._broadcast_service

    @property
    def notification_feed(self) -> Any:
        """Get the shared NotificationFeed instance."""
        if self._notification_feed is None:
            from boardwatch.services.notification_service import NotificationFeed

            self._notification_feed = NotificationFeed(
                self.board_service,
                limit=self.settings.monitor.recent_limit,
                broadcaster=self.broadcast_service,
            )
        return self._notification_feed

    @property
    def monitor_service(self) -> Any:
        """Get MonitorService instance."""
        if self._monitor_service is None:
            from boardwatch.policies.archive import ArchivePolicy
            from boardwatch.services.monitor_service import MonitorService

            monitor = self.settings.monitor
            self._monitor_service = MonitorService(
                board_service=self.board_service,
                broadcaster=self.broadcast_service,
                archive_policy=ArchivePolicy(
                    threshold_days=monitor.archive_days,
                    done_list_name=monitor.done_list_name,
                    exclusion_pattern=monitor.archive_exclusion_pattern,
                ),
                board_filter=self.settings.trello.board_filter,
            )
        return self._monitor_service

    @property
    def command_service(self) -> Any:
        """Get CommandService instance."""
        if self._command_service is None:
            from boardwatch.services.command_service import CommandService
            from boardwatch.parsers.slack_parser import SlackWebhookParser
            from boardwatch.parsers.discord_parser import DiscordWebhookParser

            self._command_service = CommandService(
                monitor=self.monitor_service,
                feed=self.notification_feed,
                parsers=[SlackWebhookParser(), DiscordWebhookParser()],
            )
        return self._command_service

    @property
    def scheduler(self) -> Any:
        """Get the SweepScheduler with the default sweeps registered."""
        if self._scheduler is None:
            from boardwatch.scheduler.jobs import JobRegistry, create_default_jobs
            from boardwatch.scheduler.scheduler import SweepScheduler

            registry = JobRegistry()
            create_default_jobs(registry, self)
            self._scheduler = SweepScheduler(
                registry, timezone=self.settings.scheduler.timezone
            )
        return self._scheduler

    def configure_board_service(
        self, factory: Callable[[], BoardService]
    ) -> "Container":
        """Configure the board service."""
        self._board_service = Provider(factory)
        return self

    def add_room_sender(
        self, factory: Callable[[], RoomSender]
    ) -> "Container":
        """Add a room sender."""
        self._room_senders.append(Provider(factory))
        return self

    def configure_settings(self, settings: Any) -> "Container":
        """Use explicit settings instead of the environment."""
        self._settings = settings
        return self

    def reset(self) -> None:
        """Reset all providers (for testing)."""
        if self._scheduler is not None and self._scheduler.is_running:
            self._scheduler.stop()
        if self._board_service:
            self._board_service.reset()
        for sender in self._room_senders:
            sender.reset()
        self._room_senders.clear()
        self._broadcast_service = None
        self._notification_feed = None
        self._monitor_service = None
        self._command_service = None
        self._scheduler = None
        self._settings = None


def configure_from_settings(container: "Container") -> "Container":
    """Wire the container from application settings.

    Missing Trello credentials are only warned about; board calls then fail
    and are reported as errors. Messages go to the log when no chat sender
    is configured.
    """
    from boardwatch.config.settings import warn_missing_settings
    from boardwatch.notifications import (
        DiscordRoomSender,
        LoggingRoomSender,
        SlackRoomSender,
    )
    from boardwatch.repositories.trello import TrelloBoardService

    if container.is_configured:
        return container

    settings = container.settings
    warn_missing_settings(settings)
    trello = settings.trello

    container.configure_board_service(
        lambda: TrelloBoardService(
            api_key=trello.api_key.get_secret_value() if trello.api_key else None,
            api_token=trello.api_token.get_secret_value() if trello.api_token else None,
            organization=trello.organization,
            base_url=trello.base_url,
            timeout=trello.timeout,
        )
    )

    slack = settings.slack
    discord = settings.discord
    if slack.bot_token:
        container.add_room_sender(
            lambda: SlackRoomSender(bot_token=slack.bot_token.get_secret_value())
        )
    if discord.webhook_url:
        container.add_room_sender(
            lambda: DiscordRoomSender(
                webhook_url=discord.webhook_url.get_secret_value(),
                username=discord.username,
            )
        )
    if not slack.bot_token and not discord.webhook_url:
        container.add_room_sender(LoggingRoomSender)

    return container


# Global container instance
container = Container()


def get_container() -> Container:
    """Get the global container instance."""
    return container


def reset_container() -> None:
    """Reset the global container (for testing)."""
    global container
    container.reset()
    container = Container()
