"""Configuration module."""

from .settings import (
    AppSettings,
    TrelloSettings,
    MonitorSettings,
    DiscordSettings,
    SlackSettings,
    SchedulerSettings,
    get_settings,
    warn_missing_settings,
)

__all__ = [
    "AppSettings",
    "TrelloSettings",
    "MonitorSettings",
    "DiscordSettings",
    "SlackSettings",
    "SchedulerSettings",
    "get_settings",
    "warn_missing_settings",
]
