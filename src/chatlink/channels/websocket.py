"""WebSocket transport built on the ``websockets`` asyncio client."""

from __future__ import annotations

import logging

from websockets.asyncio.client import ClientConnection, connect

log = logging.getLogger(__name__)


class WebSocketTransport:
    name = "websocket"

    def __init__(self, open_timeout: float = 10.0) -> None:
        self._open_timeout = open_timeout

    async def connect(self, url: str) -> ClientConnection:
        # Keepalive is the supervisor's "ping" text frame, not protocol-level pings.
        conn = await connect(url, open_timeout=self._open_timeout, ping_interval=None)
        log.debug("WebSocket handshake complete: %s", url)
        return conn
