"""Discord room sender implementation."""

from typing import Optional
import logging

import httpx

logger = logging.getLogger(__name__)

# Discord rejects message content longer than this
MAX_CONTENT_LENGTH = 2000


class DiscordRoomSender:
    """Sends room messages to Discord via webhook.

    A Discord webhook is bound to a single channel, so the room argument is
    only used for logging.
    """

    def __init__(
        self,
        webhook_url: str,
        *,
        username: str = "BoardWatch",
        avatar_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Discord sender.

        Args:
            webhook_url: Discord webhook URL
            username: Bot username to display
            avatar_url: Optional avatar URL for the bot
            http_client: Optional HTTP client for testing
        """
        self._webhook_url = webhook_url
        self._username = username
        self._avatar_url = avatar_url
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def channel_name(self) -> str:
        """Return channel name for this sender."""
        return "discord"

    async def send_to_room(self, room: Optional[str], text: str) -> bool:
        """Send text to the webhook's channel.

        Args:
            room: Room name (informational)
            text: Message text

        Returns:
            True if sent successfully, False otherwise
        """
        payload = self._build_payload(text)

        client = self._http_client or httpx.AsyncClient()
        try:
            response = await client.post(
                self._webhook_url,
                json=payload,
                timeout=10.0,
            )
            if response.status_code not in (200, 204):
                logger.warning(
                    f"Discord rejected message for room {room}: {response.status_code}"
                )
                return False
            return True
        except httpx.HTTPError as e:
            logger.error(f"Discord send failed for room {room}: {e}")
            return False
        finally:
            if self._owns_client and not self._http_client:
                await client.aclose()

    def _build_payload(self, text: str) -> dict:
        """Build Discord webhook payload.

        Args:
            text: Message text

        Returns:
            Discord webhook payload dict
        """
        if len(text) > MAX_CONTENT_LENGTH:
            text = text[: MAX_CONTENT_LENGTH - 1] + "…"

        payload = {
            "username": self._username,
            "content": text,
        }

        if self._avatar_url:
            payload["avatar_url"] = self._avatar_url

        return payload
