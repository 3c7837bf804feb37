"""Connection supervisor — owns the channel lifecycle and reconnects with backoff."""

from __future__ import annotations

import asyncio
import contextlib
import enum
import inspect
import logging
from collections.abc import Awaitable, Callable

from chatlink.backoff import BackoffState
from chatlink.channels.base import Connection, Transport
from chatlink.channels.websocket import WebSocketTransport
from chatlink.config import Settings, settings as default_settings
from chatlink.events import (
    Closed,
    Event,
    FrameReceived,
    Opened,
    Outbound,
    ProbeTick,
    RetryTick,
    Shutdown,
    StartRequested,
)
from chatlink.monitor import LivenessMonitor
from chatlink.protocol import PING, PONG, Payload, ProtocolError, decode_frame, encode_payload

log = logging.getLogger(__name__)

DeliveryCallback = Callable[[str, str], Awaitable[None] | None]


class ChannelState(enum.Enum):
    CLOSED = "closed"
    CONNECTING = "connecting"
    OPEN = "open"


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ConnectionSupervisor:
    """Keeps one chat channel alive and routes payloads to and from it.

    All state lives here and is only touched by a single actor task that
    drains an event queue. Transport I/O, the liveness monitor and the retry
    timer never mutate state directly; they post events. Events produced by a
    transport attempt carry its generation so signals from an abandoned
    attempt are ignored.
    """

    name = "chat"

    def __init__(
        self,
        on_message: DeliveryCallback,
        *,
        settings: Settings | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._transport = transport or WebSocketTransport(open_timeout=self._settings.connect_timeout)
        self._on_message = on_message

        self._state = ChannelState.CLOSED
        self._backoff = BackoffState.from_settings(self._settings)
        self._monitor = LivenessMonitor(self._settings.probe_interval, self._post)

        self._events: asyncio.Queue[Event] = asyncio.Queue()
        self._actor: asyncio.Task | None = None
        self._connection: Connection | None = None
        self._generation = 0
        self._link_task: asyncio.Task | None = None
        self._retry: asyncio.TimerHandle | None = None

        self._handlers = {
            StartRequested: self._on_start_requested,
            Opened: self._on_opened,
            FrameReceived: self._on_frame,
            Closed: self._on_closed,
            ProbeTick: self._on_probe_tick,
            RetryTick: self._on_retry_tick,
            Outbound: self._on_outbound,
        }

    # -- Observable state ---------------------------------------------------

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def attempts(self) -> int:
        """Consecutive failed attempts since the last successful open."""
        return self._backoff.attempts

    @property
    def current_delay(self) -> float:
        return self._backoff.current_delay

    @property
    def retry_pending(self) -> bool:
        return self._retry is not None

    # -- Public API ---------------------------------------------------------

    async def start(self) -> None:
        """Run the supervisor (if needed) and ask it to open the channel."""
        if self._actor is None or self._actor.done():
            self._events = asyncio.Queue()
            self._actor = asyncio.create_task(self._run(), name="chatlink-supervisor")
        self._post(StartRequested())

    async def stop(self) -> None:
        """Tear the channel down for good. No reconnect follows."""
        actor = self._actor
        if actor is None:
            return
        self._post(Shutdown())
        try:
            await actor
        finally:
            self._actor = None

    def send(self, sender: str, body: str) -> None:
        self.send_outbound(Payload(sender=sender, body=body))

    def send_outbound(self, payload: Payload) -> None:
        """Queue a payload for the channel. Dropped if blank or not open."""
        if payload.is_blank:
            log.debug("Ignoring blank message from %s", payload.sender)
            return
        self._post(Outbound(payload))

    async def __aenter__(self) -> ConnectionSupervisor:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # -- Actor --------------------------------------------------------------

    def _post(self, event: Event) -> None:
        self._events.put_nowait(event)

    async def _run(self) -> None:
        log.info("Supervisor started for %s", self._settings.endpoint_url)
        try:
            while True:
                event = await self._events.get()
                if isinstance(event, Shutdown):
                    break
                await self._handlers[type(event)](event)
        finally:
            await self._teardown()

    async def _teardown(self) -> None:
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None
        self._monitor.stop()
        if self._link_task is not None:
            self._link_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._link_task
            self._link_task = None
        self._connection = None
        self._state = ChannelState.CLOSED
        log.info("Supervisor stopped")

    def _connect(self) -> None:
        self._generation += 1
        self._state = ChannelState.CONNECTING
        log.info("Connecting to %s", self._settings.endpoint_url)
        self._link_task = asyncio.create_task(self._link(self._generation))

    async def _link(self, generation: int) -> None:
        """Open one connection and pump its signals into the event queue."""
        try:
            conn = await self._transport.connect(self._settings.endpoint_url)
        except Exception as exc:
            self._post(Closed(generation, _describe(exc)))
            return

        self._post(Opened(generation, conn))
        reason = "closed"
        try:
            while True:
                frame = await conn.recv()
                self._post(FrameReceived(generation, frame))
        except Exception as exc:
            reason = _describe(exc)
        finally:
            await self._close_quietly(conn)
        self._post(Closed(generation, reason))

    async def _close_quietly(self, conn: Connection) -> None:
        try:
            await conn.close()
        except Exception as exc:
            log.warning("Closing connection to %s failed: %s", self._settings.endpoint_url, _describe(exc))

    async def _write(self, frame: str) -> None:
        if self._connection is None:
            return
        try:
            await self._connection.send(frame)
        except Exception as exc:
            # The reader sees the same failure and posts Closed.
            log.warning("Write to %s failed: %s", self._settings.endpoint_url, _describe(exc))

    async def _deliver(self, payload: Payload) -> None:
        try:
            result = self._on_message(payload.sender, payload.body)
            if inspect.isawaitable(result):
                await result
        except Exception:
            log.exception("Delivery callback failed for message from %s", payload.sender)

    # -- Handlers -----------------------------------------------------------

    async def _on_start_requested(self, event: StartRequested) -> None:
        if self._state is not ChannelState.CLOSED:
            log.debug("Start ignored: channel is %s", self._state.value)
            return
        if self._retry is not None:
            log.debug("Start ignored: reconnect already scheduled")
            return
        self._connect()

    async def _on_retry_tick(self, event: RetryTick) -> None:
        self._retry = None
        if self._state is ChannelState.CLOSED:
            self._connect()

    async def _on_opened(self, event: Opened) -> None:
        if event.generation != self._generation or self._state is not ChannelState.CONNECTING:
            log.debug("Ignoring stale open signal (generation %d)", event.generation)
            return
        self._connection = event.connection
        self._state = ChannelState.OPEN
        self._backoff.reset()
        self._monitor.start()
        log.info("Connected to %s", self._settings.endpoint_url)

    async def _on_frame(self, event: FrameReceived) -> None:
        if event.generation != self._generation or self._state is not ChannelState.OPEN:
            log.debug("Ignoring stale frame (generation %d)", event.generation)
            return
        if event.frame == PONG:
            return
        try:
            payload = decode_frame(event.frame)
        except ProtocolError as exc:
            log.warning("Dropping malformed frame: %s", exc)
            return
        await self._deliver(payload)

    async def _on_closed(self, event: Closed) -> None:
        if event.generation != self._generation or self._state is ChannelState.CLOSED:
            log.debug("Ignoring stale close signal (generation %d)", event.generation)
            return
        was_open = self._state is ChannelState.OPEN
        self._state = ChannelState.CLOSED
        self._monitor.stop()
        self._connection = None
        self._link_task = None

        delay = self._backoff.record_failure()
        if self._retry is not None:
            self._retry.cancel()
        self._retry = asyncio.get_running_loop().call_later(delay, self._post, RetryTick())
        log.info(
            "Connection %s (%s); reconnect attempt %d in %.1fs",
            "lost" if was_open else "failed",
            event.reason,
            self._backoff.attempts,
            delay,
        )

    async def _on_probe_tick(self, event: ProbeTick) -> None:
        if not self._monitor.is_current(event) or self._state is not ChannelState.OPEN:
            return
        await self._write(PING)

    async def _on_outbound(self, event: Outbound) -> None:
        if self._state is not ChannelState.OPEN:
            log.debug("Dropping message from %s: channel is %s", event.payload.sender, self._state.value)
            return
        await self._write(encode_payload(event.payload))
