"""Unit tests for the ChangeBroadcaster."""

import asyncio
import json

from cms_sync.application.services import ChangeBroadcaster
from cms_sync.domain.entities import ChangeAction, ContentType


async def _collect(broadcaster: ChangeBroadcaster, into: list[dict]) -> None:
    async for message in broadcaster.subscribe():
        into.append(json.loads(message))


async def test_broadcast_fans_out_to_every_subscriber():
    broadcaster = ChangeBroadcaster()
    first: list[dict] = []
    second: list[dict] = []
    tasks = [asyncio.create_task(_collect(broadcaster, first)), asyncio.create_task(_collect(broadcaster, second))]
    await asyncio.sleep(0)

    delivered = await broadcaster.broadcast_change(
        ContentType.SERVICE, ChangeAction.UPDATED, {"id": 1, "title": "Hosting"}
    )
    await asyncio.sleep(0)
    await broadcaster.shutdown()
    await asyncio.gather(*tasks)

    assert delivered == 2
    assert first == second
    assert first[0]["type"] == "service_updated"
    assert first[0]["data"] == {"id": 1, "title": "Hosting"}


async def test_shutdown_ends_subscriptions():
    broadcaster = ChangeBroadcaster()
    received: list[dict] = []
    task = asyncio.create_task(_collect(broadcaster, received))
    await asyncio.sleep(0)
    assert broadcaster.client_count == 1

    await broadcaster.shutdown()
    await asyncio.wait_for(task, timeout=1)

    assert broadcaster.client_count == 0
    assert received == []


async def test_slow_subscriber_is_disconnected_when_queue_fills():
    broadcaster = ChangeBroadcaster(max_queue_size=2)
    stream = broadcaster.subscribe()
    first = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)

    # Nothing is consumed until the loop yields, so the third broadcast finds the queue full.
    for n in range(4):
        await broadcaster.broadcast("project_created", {"id": n})

    assert json.loads(await first)["data"] == {"id": 0}
    assert broadcaster.client_count == 0
    await stream.aclose()


async def test_broadcast_without_subscribers_delivers_nothing():
    assert await ChangeBroadcaster().broadcast("project_deleted", {"id": 1}) == 0
