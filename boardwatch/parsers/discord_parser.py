"""Discord webhook parser."""

from datetime import datetime

from boardwatch.domain.models import ChatMessage


class DiscordWebhookParser:
    """Parse Discord message payloads into chat messages."""

    @property
    def platform(self) -> str:
        return "discord"

    def can_parse(self, payload: dict) -> bool:
        """Check if payload is a Discord message from a human."""
        author = payload.get("author") or {}
        return (
            "content" in payload
            and "channel_id" in payload
            and not author.get("bot", False)
        )

    def parse(self, payload: dict) -> ChatMessage:
        """Parse Discord message into ChatMessage."""
        author = payload.get("author") or {}

        timestamp_str = payload.get("timestamp")
        if timestamp_str:
            try:
                # Discord uses ISO format with Z suffix
                timestamp = datetime.fromisoformat(
                    timestamp_str.replace("Z", "+00:00")
                )
            except (ValueError, TypeError):
                timestamp = datetime.now()
        else:
            timestamp = datetime.now()

        return ChatMessage(
            source_platform="discord",
            channel_id=payload.get("channel_id", ""),
            user_id=author.get("id", ""),
            user_name=author.get("username", ""),
            text=payload.get("content", ""),
            timestamp=timestamp,
            raw_payload=payload,
        )
