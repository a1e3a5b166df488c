"""Trello REST API board service implementation."""

from datetime import datetime, timezone
from typing import Any, Optional
import logging

import httpx

from ..domain.models import (
    Board,
    BoardList,
    BoardNotification,
    BoardServiceError,
    Card,
    NotificationKind,
    ServiceResult,
)

logger = logging.getLogger(__name__)


class TrelloBoardService:
    """Board service backed by the Trello REST API.

    Every call returns a ServiceResult; transport errors and non-2xx
    responses are turned into failures instead of being raised. Without
    both credentials every call fails without touching the network.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_token: Optional[str],
        *,
        organization: str = "scopyleft",
        base_url: str = "https://api.trello.com/1",
        timeout: float = 15.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Trello service.

        Args:
            api_key: Trello API key, calls fail without it
            api_token: Trello API token, calls fail without it
            organization: Organization whose boards are monitored
            base_url: Trello API base URL
            timeout: Request timeout in seconds
            http_client: Optional HTTP client for testing
        """
        self._api_key = api_key
        self._api_token = api_token
        self._organization = organization
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def organization(self) -> str:
        return self._organization

    @property
    def missing_credentials(self) -> list[str]:
        """Names of the credentials that were not provided."""
        missing = []
        if not self._api_key:
            missing.append("API key")
        if not self._api_token:
            missing.append("API token")
        return missing

    def _auth_params(self) -> dict:
        """Get authentication query parameters."""
        return {"key": self._api_key, "token": self._api_token}

    async def _get_client(self) -> httpx.AsyncClient:
        """Get HTTP client."""
        if self._http_client:
            return self._http_client
        return httpx.AsyncClient()

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        params: Optional[dict] = None,
    ) -> ServiceResult[Any]:
        """Perform a request and wrap the decoded body in a ServiceResult.

        Args:
            operation: Operation name used in error reports
            method: HTTP method ("get", "put" or "post")
            path: Path relative to the API base URL
            params: Extra query parameters

        Returns:
            Success with the JSON body, or failure with a BoardServiceError
        """
        missing = self.missing_credentials
        if missing:
            return ServiceResult.failure(
                BoardServiceError(operation, f"missing Trello {' and '.join(missing)}")
            )

        query = {**self._auth_params(), **(params or {})}
        url = f"{self._base_url}{path}"

        client = await self._get_client()
        try:
            send = getattr(client, method)
            response = await send(url, params=query, timeout=self._timeout)

            if response.status_code >= 400:
                return ServiceResult.failure(
                    BoardServiceError(
                        operation, response.text or "request rejected", response.status_code
                    )
                )

            if not response.content:
                return ServiceResult.success(None)
            return ServiceResult.success(response.json())

        except httpx.HTTPError as e:
            logger.debug(f"{operation} transport error: {e!r}")
            return ServiceResult.failure(BoardServiceError(operation, str(e) or repr(e)))
        except ValueError as e:
            return ServiceResult.failure(
                BoardServiceError(operation, f"invalid JSON response: {e}")
            )
        finally:
            if self._owns_client and not self._http_client:
                await client.aclose()

    async def list_boards(
        self, filter: Optional[str] = "pinned"
    ) -> ServiceResult[list[Board]]:
        """List the organization's boards with their open lists.

        Args:
            filter: Trello board filter, or None for every board

        Returns:
            Result holding the boards
        """
        params = {"lists": "open"}
        if filter:
            params["filter"] = filter

        result = await self._call(
            "list boards",
            "get",
            f"/organizations/{self._organization}/boards",
            params,
        )
        if not result.ok:
            return result

        boards = [
            board
            for raw in result.value or []
            if (board := self._parse_board(raw)) is not None
        ]
        return ServiceResult.success(boards)

    async def list_lists(
        self, board_id: str, include_cards: bool = True
    ) -> ServiceResult[list[BoardList]]:
        """List a board's open lists.

        Args:
            board_id: Board to read
            include_cards: Whether to populate each list's open cards

        Returns:
            Result holding the lists
        """
        result = await self._call(
            f"list lists of board {board_id}",
            "get",
            f"/boards/{board_id}/lists",
            {"cards": "open" if include_cards else "none"},
        )
        if not result.ok:
            return result

        lists = [
            board_list
            for raw in result.value or []
            if (board_list := self._parse_list(raw, board_id)) is not None
        ]
        return ServiceResult.success(lists)

    async def archive_card(self, card_id: str) -> ServiceResult[None]:
        """Close a card."""
        result = await self._call(
            f"archive card {card_id}",
            "put",
            f"/cards/{card_id}/closed",
            {"value": "true"},
        )
        return result if not result.ok else ServiceResult.success(None)

    async def comment_on_card(self, card_id: str, text: str) -> ServiceResult[None]:
        """Add a comment to a card."""
        result = await self._call(
            f"comment on card {card_id}",
            "post",
            f"/cards/{card_id}/actions/comments",
            {"text": text},
        )
        return result if not result.ok else ServiceResult.success(None)

    async def list_recent_notifications(
        self, query: dict
    ) -> ServiceResult[list[BoardNotification]]:
        """List the member's notifications, newest first.

        Args:
            query: Trello notification query (filter, read_filter, limit, since)

        Returns:
            Result holding the notifications in feed order
        """
        params = {
            key: ",".join(value) if isinstance(value, (list, tuple)) else value
            for key, value in query.items()
            if value is not None
        }
        result = await self._call(
            "list notifications",
            "get",
            "/members/me/notifications",
            params,
        )
        if not result.ok:
            return result

        notifications = [
            notification
            for raw in result.value or []
            if (notification := self._parse_notification(raw)) is not None
        ]
        return ServiceResult.success(notifications)

    async def ping(self) -> ServiceResult[None]:
        """Check that the API accepts our credentials."""
        result = await self._call("ping", "get", "/members/me", {"fields": "id"})
        return result if not result.ok else ServiceResult.success(None)

    def _parse_board(self, raw: dict) -> Optional[Board]:
        """Convert a Trello board payload to a Board.

        Args:
            raw: Board JSON object

        Returns:
            Board or None if the payload lacks required fields
        """
        try:
            lists = tuple(
                board_list
                for raw_list in raw.get("lists") or []
                if (board_list := self._parse_list(raw_list, raw["id"])) is not None
            )
            return Board(id=raw["id"], name=raw.get("name", ""), lists=lists)
        except (KeyError, TypeError):
            logger.warning(f"Skipping malformed board payload: {raw!r}")
            return None

    def _parse_list(self, raw: dict, board_id: str) -> Optional[BoardList]:
        """Convert a Trello list payload to a BoardList."""
        try:
            cards = tuple(
                card
                for raw_card in raw.get("cards") or []
                if (card := self._parse_card(raw_card, raw["id"])) is not None
            )
            return BoardList(
                id=raw["id"],
                name=raw.get("name", ""),
                cards=cards,
                board_id=raw.get("idBoard", board_id),
            )
        except (KeyError, TypeError):
            logger.warning(f"Skipping malformed list payload: {raw!r}")
            return None

    def _parse_card(self, raw: dict, list_id: str) -> Optional[Card]:
        """Convert a Trello card payload to a Card."""
        try:
            return Card(
                id=raw["id"],
                name=raw.get("name", ""),
                date_last_activity=parse_timestamp(raw.get("dateLastActivity")),
                closed=bool(raw.get("closed", False)),
                short_url=raw.get("shortUrl", ""),
                list_id=raw.get("idList", list_id),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping malformed card payload: {raw!r}")
            return None

    def _parse_notification(self, raw: dict) -> Optional[BoardNotification]:
        """Convert a Trello notification payload to a BoardNotification.

        Optional fields (card, lists, text) may be missing depending on the type.
        """
        try:
            raw_type = raw.get("type", "")
            data = raw.get("data") or {}
            card = data.get("card") or {}
            creator = raw.get("memberCreator") or {}
            list_before = data.get("listBefore") or {}
            list_after = data.get("listAfter") or {}

            return BoardNotification(
                id=raw["id"],
                raw_type=raw_type,
                kind=NotificationKind.parse(raw_type),
                actor=creator.get("username", ""),
                card_name=card.get("name", ""),
                card_url=card.get("shortUrl", ""),
                text=data.get("text", ""),
                list_before=list_before.get("name"),
                list_after=list_after.get("name"),
            )
        except (KeyError, TypeError, AttributeError):
            logger.warning(f"Skipping malformed notification payload: {raw!r}")
            return None


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse a Trello ISO timestamp into an aware UTC datetime.

    A missing timestamp counts as "active now", so the card is never stale.
    """
    if not value:
        return datetime.now(timezone.utc)
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
