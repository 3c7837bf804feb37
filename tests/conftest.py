"""Shared fakes and fixtures for driving the supervisor without a network."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from chatlink.config import Settings

_CLOSED = object()


class FakeConnection:
    """In-memory connection: tests feed inbound frames and inspect sent ones."""

    def __init__(self, close_error: BaseException | None = None) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.close_calls = 0
        self._close_error = close_error
        self._inbound: asyncio.Queue = asyncio.Queue()

    def feed(self, frame: str | bytes) -> None:
        self._inbound.put_nowait(frame)

    def drop(self) -> None:
        """Simulate the peer going away."""
        self._inbound.put_nowait(_CLOSED)

    async def send(self, frame: str) -> None:
        if self.closed:
            raise ConnectionError("connection closed")
        self.sent.append(frame)

    async def recv(self) -> str | bytes:
        item = await self._inbound.get()
        if item is _CLOSED:
            self.closed = True
            raise ConnectionError("peer closed")
        return item

    async def close(self) -> None:
        self.close_calls += 1
        if self._close_error is not None:
            raise self._close_error
        if not self.closed:
            self.closed = True
            self._inbound.put_nowait(_CLOSED)


class FakeTransport:
    """Connects according to a script of outcomes; succeeds once the script runs out."""

    name = "fake"

    def __init__(
        self,
        outcomes: list[BaseException | None] | None = None,
        *,
        before_connect: Callable[[], Awaitable[None] | None] | None = None,
        close_error: BaseException | None = None,
    ) -> None:
        self.outcomes = list(outcomes or [])
        self.connections: list[FakeConnection] = []
        self.urls: list[str] = []
        self._before_connect = before_connect
        self._close_error = close_error

    @property
    def last(self) -> FakeConnection:
        return self.connections[-1]

    async def connect(self, url: str) -> FakeConnection:
        if self._before_connect is not None:
            result = self._before_connect()
            if result is not None:
                await result
        self.urls.append(url)
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if outcome is not None:
                raise outcome
        conn = FakeConnection(close_error=self._close_error)
        self.connections.append(conn)
        return conn


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    return FakeTransport


@pytest.fixture
def wait_for() -> Callable[..., Awaitable[None]]:
    async def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        """Poll until ``predicate()`` is true."""
        async with asyncio.timeout(timeout):
            while not predicate():
                await asyncio.sleep(0.001)

    return _wait_for


@pytest.fixture
def monitor_tasks() -> Callable[[], list[asyncio.Task]]:
    """Live liveness-monitor timer tasks on the running loop."""

    def _monitor_tasks() -> list[asyncio.Task]:
        return [
            t for t in asyncio.all_tasks()
            if not t.done() and t.get_coro().__qualname__ == "LivenessMonitor._run"
        ]

    return _monitor_tasks


@pytest.fixture
def fast_settings() -> Settings:
    return Settings(
        endpoint_url="ws://chat.test/chat",
        probe_interval=0.02,
        backoff_base=0.01,
        backoff_multiplier=1.5,
        backoff_max=0.05,
    )
