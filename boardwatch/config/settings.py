"""Application settings using Pydantic."""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class TrelloSettings(BaseSettings):
    """Trello API configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TRELLO_",
        extra="ignore",
    )

    api_key: Optional[SecretStr] = Field(default=None)
    api_token: Optional[SecretStr] = Field(default=None)
    organization: str = Field(default="scopyleft")
    # Board filter used by the periodic sweeps ("pinned", "open", ...)
    board_filter: str = Field(default="pinned")
    base_url: str = Field(default="https://api.trello.com/1")
    timeout: float = Field(default=15.0)


class MonitorSettings(BaseSettings):
    """Board monitoring configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MONITOR_",
        extra="ignore",
    )

    interval_ms: int = Field(default=300_000, gt=0)
    archive_days: int = Field(default=15, ge=0)
    # Exact, accent-sensitive match against list names
    done_list_name: str = Field(default="Terminé")
    archive_exclusion_pattern: str = Field(default=r"^(Lisez-moi|Read-me)")
    notify_room: Optional[str] = Field(default=None)
    recent_limit: int = Field(default=10, gt=0)

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000


class DiscordSettings(BaseSettings):
    """Discord webhook configuration."""

    model_config = SettingsConfigDict(env_prefix="DISCORD_", extra="ignore")

    webhook_url: Optional[SecretStr] = Field(default=None)
    username: str = Field(default="BoardWatch")


class SlackSettings(BaseSettings):
    """Slack configuration."""

    model_config = SettingsConfigDict(env_prefix="SLACK_", extra="ignore")

    signing_secret: Optional[SecretStr] = Field(default=None)
    bot_token: Optional[SecretStr] = Field(default=None)


class SchedulerSettings(BaseSettings):
    """Scheduler configuration."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_", extra="ignore")

    enabled: bool = Field(default=True)
    timezone: str = Field(default="Europe/Paris")


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO")

    # Nested settings - manually create to avoid env prefix issues
    @property
    def trello(self) -> TrelloSettings:
        return TrelloSettings()

    @property
    def monitor(self) -> MonitorSettings:
        return MonitorSettings()

    @property
    def discord(self) -> DiscordSettings:
        return DiscordSettings()

    @property
    def slack(self) -> SlackSettings:
        return SlackSettings()

    @property
    def scheduler(self) -> SchedulerSettings:
        return SchedulerSettings()


def warn_missing_settings(settings: AppSettings) -> list[str]:
    """Log a warning for each missing setting the monitor needs.

    Missing values never stop startup; the bot keeps running degraded.

    Returns:
        Names of the environment variables that are missing
    """
    trello = settings.trello
    monitor = settings.monitor

    missing = []
    if not trello.api_key:
        missing.append("TRELLO_API_KEY")
    if not trello.api_token:
        missing.append("TRELLO_API_TOKEN")
    if not monitor.notify_room:
        missing.append("MONITOR_NOTIFY_ROOM")

    for name in missing:
        logger.warning(f"missing {name}")
    return missing


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
