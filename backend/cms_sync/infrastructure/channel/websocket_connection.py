"""WebSocket adapter for the ChannelConnection interface."""

import logging

import websockets
from websockets.exceptions import ConnectionClosed

from cms_sync.application.interfaces.channel_connection import ChannelConnection
from cms_sync.domain.exceptions import ChannelClosedError

logger = logging.getLogger(__name__)

ABNORMAL_CLOSURE = 1006


def _closed_error(exc: ConnectionClosed) -> ChannelClosedError:
    """Translate a websockets close into the close code the peer actually sent."""
    frame = exc.rcvd
    if frame is None:
        return ChannelClosedError(ABNORMAL_CLOSURE, "connection lost")
    return ChannelClosedError(frame.code, frame.reason)


class WebSocketChannelConnection(ChannelConnection):
    """Wraps one ``websockets`` client connection."""

    def __init__(self, websocket) -> None:
        self._websocket = websocket

    async def send(self, message: str) -> None:
        try:
            await self._websocket.send(message)
        except ConnectionClosed as exc:
            raise _closed_error(exc) from exc

    async def recv(self) -> str:
        try:
            message = await self._websocket.recv()
        except ConnectionClosed as exc:
            raise _closed_error(exc) from exc
        if isinstance(message, bytes):
            return message.decode("utf-8", errors="replace")
        return message

    async def close(self, code: int = 1000, reason: str = "") -> None:
        await self._websocket.close(code=code, reason=reason)


async def connect_websocket(url: str, *, open_timeout: float = 10.0) -> WebSocketChannelConnection:
    """Open a WebSocket to ``url``; raises on handshake failure or timeout."""
    logger.debug("Connecting to %s", url)
    websocket = await websockets.connect(url, open_timeout=open_timeout)
    return WebSocketChannelConnection(websocket)
