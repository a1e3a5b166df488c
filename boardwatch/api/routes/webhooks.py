"""Webhook routes for Slack and Discord chat commands."""

from typing import Any
from fastapi import APIRouter, Request

from ...services.command_service import CommandService
from ...container import get_container

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def get_command_service() -> CommandService:
    """Get CommandService from container."""
    container = get_container()
    return container.command_service


async def _run_command(payload: dict) -> dict[str, Any]:
    """Run the command in a chat payload and answer in its channel."""
    service = get_command_service()
    outcome = await service.process_webhook(payload)
    if outcome is None:
        return {"status": "ok"}

    message, replies = outcome
    await get_container().broadcast_service.reply(
        message.source_platform, message.channel_id, replies
    )
    return {
        "status": "success",
        "channel": message.channel_id,
        "replies": replies,
    }


@router.post("/slack")
async def slack_webhook(request: Request) -> dict[str, Any]:
    """Handle Slack webhook events.

    Supports:
    - URL verification challenge
    - Event callbacks (app_mention, message)
    """
    payload = await request.json()

    # Handle URL verification
    if payload.get("type") == "url_verification":
        return {"challenge": payload.get("challenge")}

    if payload.get("type") == "event_callback":
        return await _run_command(payload)

    return {"status": "ok"}


@router.post("/discord")
async def discord_webhook(request: Request) -> dict[str, Any]:
    """Handle Discord webhook events.

    Supports:
    - Ping (type 1)
    - Message events
    """
    payload = await request.json()

    # Handle Discord ping (verification)
    if payload.get("type") == 1:
        return {"type": 1}

    return await _run_command(payload)


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for webhooks."""
    return {"status": "healthy"}
