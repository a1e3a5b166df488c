"""Slack room sender implementation."""

from typing import Optional
import logging

import httpx

logger = logging.getLogger(__name__)


class SlackRoomSender:
    """Posts room messages with the Slack Web API (chat.postMessage)."""

    def __init__(
        self,
        bot_token: str,
        *,
        api_url: str = "https://slack.com/api/chat.postMessage",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Slack sender.

        Args:
            bot_token: Slack bot token (xoxb-...)
            api_url: chat.postMessage endpoint
            http_client: Optional HTTP client for testing
        """
        self._bot_token = bot_token
        self._api_url = api_url
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def channel_name(self) -> str:
        """Return channel name for this sender."""
        return "slack"

    async def send_to_room(self, room: Optional[str], text: str) -> bool:
        """Post text to a Slack channel.

        Args:
            room: Channel ID or name
            text: Message text

        Returns:
            True if Slack accepted the message, False otherwise
        """
        if not room:
            logger.warning(f"No room to send Slack message to: {text}")
            return False

        client = self._http_client or httpx.AsyncClient()
        try:
            response = await client.post(
                self._api_url,
                json={"channel": room, "text": text},
                headers=self._build_headers(),
                timeout=10.0,
            )
            if response.status_code != 200:
                logger.warning(f"Slack rejected message for {room}: {response.status_code}")
                return False

            body = response.json()
            if not body.get("ok"):
                logger.warning(f"Slack rejected message for {room}: {body.get('error')}")
                return False
            return True
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Slack send failed for {room}: {e}")
            return False
        finally:
            if self._owns_client and not self._http_client:
                await client.aclose()

    def _build_headers(self) -> dict:
        """Build HTTP headers.

        Returns:
            Headers dict
        """
        return {
            "Authorization": f"Bearer {self._bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        }
