"""Unit tests for the ChannelSupervisor (connection lifecycle and routing)."""

import asyncio
import json

import pytest

from cms_sync.application.interfaces import ChannelConnection
from cms_sync.application.services import ChannelState, ChannelSupervisor, backoff_delay
from cms_sync.domain.entities import ChangeAction
from cms_sync.domain.exceptions import ChannelClosedError


class ScriptedConnection(ChannelConnection):
    """Delivers queued frames, then closes with ``close_code`` (None = stay open)."""

    def __init__(self, frames=(), close_code: int | None = 1006):
        self.inbox: asyncio.Queue[str] = asyncio.Queue()
        for frame in frames:
            self.inbox.put_nowait(frame)
        self.close_code = close_code
        self.sent: list[str] = []
        self.closed_with: tuple[int, str] | None = None

    async def send(self, message: str) -> None:
        self.sent.append(message)

    async def recv(self) -> str:
        if self.inbox.empty() and self.close_code is not None:
            raise ChannelClosedError(self.close_code, "scripted")
        return await self.inbox.get()

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed_with = (code, reason)


class FakeConnector:
    """Hands out scripted outcomes in order; the last one repeats."""

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self.urls: list[str] = []

    async def __call__(self, url: str) -> ChannelConnection:
        self.urls.append(url)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _frame(event_type: str, data: dict | None = None) -> str:
    return json.dumps({"type": event_type, "data": data or {}, "timestamp": "2024-05-01T10:00:00Z"})


def _supervisor(connector, handler=None, sleep=None) -> ChannelSupervisor:
    return ChannelSupervisor(
        "ws://test/ws",
        "project",
        handler or (lambda event: None),
        connector,
        sleep=sleep or RecordingSleep(),
    )


def test_backoff_doubles_and_caps():
    assert [backoff_delay(n) for n in range(1, 7)] == [1, 2, 4, 8, 16, 16]
    assert backoff_delay(3, base_delay=0.5, max_delay=1.5) == 1.5


class TestReconnection:
    async def test_gives_up_after_five_attempts_with_exponential_delays(self):
        connector = FakeConnector(OSError("refused"))
        sleep = RecordingSleep()
        supervisor = _supervisor(connector, sleep=sleep)

        await supervisor.start()
        await supervisor.wait_closed()

        assert sleep.delays == [1, 2, 4, 8, 16]
        assert len(connector.urls) == 6
        assert supervisor.state is ChannelState.DISCONNECTED
        assert supervisor.reconnect_attempts == 5

    async def test_normal_closure_is_not_retried(self):
        connector = FakeConnector(ScriptedConnection(close_code=1000))
        sleep = RecordingSleep()
        supervisor = _supervisor(connector, sleep=sleep)

        await supervisor.start()
        await supervisor.wait_closed()

        assert sleep.delays == []
        assert len(connector.urls) == 1

    async def test_successful_connect_resets_attempt_counter(self):
        connector = FakeConnector(
            OSError("refused"),
            ScriptedConnection(close_code=1006),
            ScriptedConnection(close_code=1000),
        )
        sleep = RecordingSleep()
        supervisor = _supervisor(connector, sleep=sleep)

        await supervisor.start()
        await supervisor.wait_closed()

        assert sleep.delays == [1, 1]
        assert supervisor.reconnect_attempts == 0

    async def test_stop_closes_with_normal_code(self):
        connection = ScriptedConnection(close_code=None)
        supervisor = _supervisor(FakeConnector(connection))

        await supervisor.start()
        for _ in range(5):
            await asyncio.sleep(0)
        assert supervisor.state is ChannelState.CONNECTED

        await supervisor.stop()

        assert connection.closed_with == (1000, "Component unmounting")
        assert supervisor.state is ChannelState.CLOSED
        assert not supervisor.running


class TestMessageHandling:
    async def test_routes_only_own_change_events(self):
        received = []
        connection = ScriptedConnection(
            [
                _frame("connection"),
                _frame("project_created", {"id": 1, "title": "One"}),
                _frame("service_created", {"id": 2}),
                "not json at all",
                json.dumps(["a", "list"]),
                _frame("project_deleted", {"id": 1}),
            ],
            close_code=1000,
        )
        supervisor = _supervisor(FakeConnector(connection), handler=received.append)

        await supervisor.start()
        await supervisor.wait_closed()

        assert [(e.entity_type, e.action) for e in received] == [
            ("project", ChangeAction.CREATED),
            ("project", ChangeAction.DELETED),
        ]
        assert received[0].data == {"id": 1, "title": "One"}
        assert received[0].timestamp is not None

    async def test_sends_ping_after_connecting(self):
        connection = ScriptedConnection(close_code=1000)
        supervisor = _supervisor(FakeConnector(connection))

        await supervisor.start()
        await supervisor.wait_closed()

        probe = json.loads(connection.sent[0])
        assert probe["type"] == "ping"
        assert probe["component"] == "project"

    async def test_handler_failure_does_not_stop_delivery(self, caplog):
        received = []

        def handler(event):
            received.append(event)
            if len(received) == 1:
                raise RuntimeError("handler blew up")

        connection = ScriptedConnection(
            [_frame("project_updated", {"id": 1}), _frame("project_updated", {"id": 2})],
            close_code=1000,
        )
        supervisor = _supervisor(FakeConnector(connection), handler=handler)

        await supervisor.start()
        await supervisor.wait_closed()

        assert len(received) == 2
        assert any("Change handler failed" in r.message for r in caplog.records)


@pytest.mark.parametrize("code", [1001, 1006, 4000])
async def test_any_non_normal_close_triggers_reconnect(code):
    connector = FakeConnector(
        ScriptedConnection(close_code=code), ScriptedConnection(close_code=1000)
    )
    sleep = RecordingSleep()
    supervisor = _supervisor(connector, sleep=sleep)

    await supervisor.start()
    await supervisor.wait_closed()

    assert sleep.delays == [1]
    assert len(connector.urls) == 2
