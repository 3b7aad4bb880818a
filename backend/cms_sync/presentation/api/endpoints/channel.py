"""WebSocket notification channel — relays content change broadcasts."""

import asyncio
import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from cms_sync.application.services import ChangeBroadcaster
from cms_sync.infrastructure.dependencies import get_change_broadcaster

logger = logging.getLogger(__name__)

GOING_AWAY = 1001

router = APIRouter(tags=["Channel"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _relay(websocket: WebSocket, broadcaster: ChangeBroadcaster) -> None:
    """Forward broadcasts until the broadcaster disconnects this subscriber."""
    try:
        async for message in broadcaster.subscribe():
            await websocket.send_text(message)
        await websocket.close(code=GOING_AWAY, reason="Server shutting down")
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.debug("Relay stopped, socket gone: %s", e)


async def _handle_inbound(websocket: WebSocket, raw: str) -> None:
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Unparseable channel message: %.200s", raw)
        return
    if isinstance(message, dict) and message.get("type") == "ping":
        await websocket.send_json({"type": "pong", "timestamp": _timestamp()})
        return
    logger.debug("Channel message received: %s", message)


@router.websocket("/ws")
async def channel_endpoint(
    websocket: WebSocket,
    broadcaster: ChangeBroadcaster = Depends(get_change_broadcaster),
) -> None:
    await websocket.accept()
    client = websocket.client.host if websocket.client else "unknown"
    logger.info("Channel client connected from %s", client)
    await websocket.send_json(
        {
            "type": "connection",
            "message": "Connected to content change channel",
            "timestamp": _timestamp(),
        }
    )

    relay = asyncio.create_task(_relay(websocket, broadcaster))
    try:
        while True:
            raw = await websocket.receive_text()
            await _handle_inbound(websocket, raw)
    except WebSocketDisconnect as e:
        logger.info("Channel client %s disconnected with code %s", client, e.code)
    except RuntimeError:
        # receive after the relay closed the socket on shutdown
        logger.debug("Channel socket for %s already closed", client)
    finally:
        relay.cancel()
        try:
            await relay
        except asyncio.CancelledError:
            pass
