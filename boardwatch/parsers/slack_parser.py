"""Slack webhook parser."""

from datetime import datetime

from boardwatch.domain.models import ChatMessage


class SlackWebhookParser:
    """Parse Slack event payloads into chat messages."""

    @property
    def platform(self) -> str:
        return "slack"

    def can_parse(self, payload: dict) -> bool:
        """Check if payload is a Slack message event not sent by a bot."""
        event = payload.get("event", {})
        return (
            payload.get("type") == "event_callback"
            and event.get("type") in ("app_mention", "message")
            and "bot_id" not in event
        )

    def parse(self, payload: dict) -> ChatMessage:
        """Parse Slack event into ChatMessage."""
        event = payload.get("event", {})

        ts = event.get("ts", "0")
        try:
            timestamp = datetime.fromtimestamp(float(ts))
        except (ValueError, TypeError):
            timestamp = datetime.now()

        return ChatMessage(
            source_platform="slack",
            channel_id=event.get("channel", ""),
            user_id=event.get("user", ""),
            user_name=event.get("user_name", ""),
            text=event.get("text", ""),
            timestamp=timestamp,
            raw_payload=payload,
        )
