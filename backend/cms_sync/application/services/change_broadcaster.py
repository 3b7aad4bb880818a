"""Change Broadcaster — in-process fan-out of content change notifications."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

from cms_sync.domain.entities import ChangeAction, ContentType

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


class ChangeBroadcaster:
    """Manages channel subscribers and broadcasts content change events.

    Each connected client gets its own bounded asyncio.Queue. Broadcasting
    pushes the serialized message to all queues; a client whose queue is
    full is disconnected.
    """

    def __init__(self, max_queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queues: list[asyncio.Queue[str | None]] = []
        self._max_queue_size = max_queue_size

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Subscribe to change messages. Yields JSON strings.

        The generator automatically unsubscribes when the consumer stops.
        """
        # One slot above the limit so a disconnect sentinel always fits.
        queue: asyncio.Queue[str | None] = asyncio.Queue(self._max_queue_size + 1)
        self._queues.append(queue)
        try:
            while True:
                message = await queue.get()
                if message is None:
                    break
                yield message
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> int:
        """Broadcast a ``{type, data, timestamp}`` message. Returns the delivery count."""
        message = json.dumps(
            {
                "type": event_type,
                "data": data,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            default=str,
        )
        dead_queues: list[asyncio.Queue[str | None]] = []
        delivered = 0

        for queue in self._queues:
            if queue.qsize() >= self._max_queue_size:
                dead_queues.append(queue)
                logger.warning("Channel client queue full — disconnecting")
                continue
            queue.put_nowait(message)
            delivered += 1

        for q in dead_queues:
            q.put_nowait(None)
            self._queues.remove(q)

        logger.info("Broadcast %s to %d client(s)", event_type, delivered)
        return delivered

    async def broadcast_change(
        self, content_type: ContentType, action: ChangeAction, data: dict[str, Any]
    ) -> int:
        return await self.broadcast(f"{content_type.value}_{action.value}", data)

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for queue in self._queues:
            queue.put_nowait(None)
        self._queues.clear()

    @property
    def client_count(self) -> int:
        return len(self._queues)
