"""Channel Supervisor — keeps the change notification connection alive.

Runs as a single asyncio task: connect, listen, and on an unexpected close
back off exponentially before trying again, up to a fixed budget.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from enum import Enum

from cms_sync.application.interfaces import ChannelConnection, ChannelConnector
from cms_sync.application.schemas.channel import parse_channel_message, to_change_event
from cms_sync.domain.entities import ChangeEvent
from cms_sync.domain.exceptions import ChannelClosedError, ChannelMessageError

logger = logging.getLogger(__name__)

NORMAL_CLOSURE = 1000
ABNORMAL_CLOSURE = 1006

ChangeHandler = Callable[[ChangeEvent], None]
Sleeper = Callable[[float], Awaitable[None]]


class ChannelState(str, Enum):
    """Connection lifecycle of a supervisor."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


def backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 16.0) -> float:
    """Delay before reconnect ``attempt`` (1-based): base doubling, capped."""
    return min(base_delay * 2 ** (attempt - 1), max_delay)


class ChannelSupervisor:
    """Delivers change events for one entity type from the notification channel.

    Failed connects count as abnormal closures.  After ``max_attempts``
    consecutive failures the supervisor stays disconnected and the cache
    falls back to refetch-only consistency.
    """

    def __init__(
        self,
        url: str,
        entity_type: str,
        handler: ChangeHandler,
        connector: ChannelConnector,
        *,
        max_attempts: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 16.0,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._url = url
        self._entity_type = entity_type
        self._handler = handler
        self._connector = connector
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._sleep = sleep

        self._state = ChannelState.DISCONNECTED
        self._attempts = 0
        self._connection: ChannelConnection | None = None
        self._task: asyncio.Task | None = None
        self._stopping = False

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def reconnect_attempts(self) -> int:
        return self._attempts

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the connection loop."""
        if self.running:
            return
        self._stopping = False
        self._task = asyncio.create_task(self._run())
        logger.info("Channel supervisor for %s started (%s)", self._entity_type, self._url)

    async def stop(self) -> None:
        """Cancel any pending reconnect and close with a normal closure."""
        self._stopping = True
        connection = self._connection
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        if connection is not None:
            try:
                await connection.close(NORMAL_CLOSURE, "Component unmounting")
            except Exception as exc:
                logger.debug("Error closing channel for %s: %s", self._entity_type, exc)
        self._connection = None
        self._state = ChannelState.CLOSED
        logger.info("Channel supervisor for %s stopped", self._entity_type)

    async def wait_closed(self) -> None:
        """Wait until the connection loop exits on its own."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _run(self) -> None:
        while not self._stopping:
            code = await self._connect_and_listen()
            if self._stopping:
                break
            if code == NORMAL_CLOSURE:
                logger.info("Channel for %s closed normally; not reconnecting", self._entity_type)
                break
            if self._attempts >= self._max_attempts:
                logger.warning(
                    "Giving up on channel reconnection for %s after %d attempts",
                    self._entity_type,
                    self._attempts,
                )
                break

            self._attempts += 1
            delay = backoff_delay(self._attempts, self._base_delay, self._max_delay)
            logger.info(
                "Will attempt to reconnect channel for %s (%d/%d) after %.1fs",
                self._entity_type,
                self._attempts,
                self._max_attempts,
                delay,
            )
            await self._sleep(delay)

    async def _connect_and_listen(self) -> int:
        """Run one connection to completion and return its close code."""
        self._state = ChannelState.CONNECTING
        try:
            connection = await self._connector(self._url)
        except Exception as exc:
            logger.warning("Could not connect channel for %s: %s", self._entity_type, exc)
            self._state = ChannelState.DISCONNECTED
            return ABNORMAL_CLOSURE

        self._connection = connection
        self._state = ChannelState.CONNECTED
        self._attempts = 0
        logger.info("Channel connection established for %s", self._entity_type)

        try:
            await self._send_ping(connection)
            while True:
                raw = await connection.recv()
                self._handle_message(raw)
        except ChannelClosedError as exc:
            logger.info(
                "Channel for %s closed with code %d - reason: %s",
                self._entity_type,
                exc.code,
                exc.reason or "No reason provided",
            )
            return exc.code
        except Exception:
            logger.exception("Channel connection for %s failed", self._entity_type)
            return ABNORMAL_CLOSURE
        finally:
            self._connection = None
            if self._state is not ChannelState.CLOSED:
                self._state = ChannelState.DISCONNECTED

    async def _send_ping(self, connection: ChannelConnection) -> None:
        probe = {
            "type": "ping",
            "component": self._entity_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await connection.send(json.dumps(probe))
        except Exception as exc:
            logger.warning("Failed to send initial ping for %s: %s", self._entity_type, exc)

    def _handle_message(self, raw: str) -> None:
        try:
            message = parse_channel_message(raw)
        except ChannelMessageError as exc:
            logger.warning("Dropping channel message for %s: %s", self._entity_type, exc.reason)
            return

        event = to_change_event(message)
        if event is None:
            logger.debug("Ignoring %s message", message.type)
            return
        if event.entity_type != self._entity_type:
            return

        try:
            self._handler(event)
        except Exception:
            logger.exception("Change handler failed for %s", event.event_type)
