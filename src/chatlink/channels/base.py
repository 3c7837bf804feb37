"""Transport protocol — interface the supervisor uses to reach the endpoint."""

from __future__ import annotations

from typing import Protocol


class Connection(Protocol):
    """One established bidirectional text channel."""

    async def send(self, frame: str) -> None:
        """Write a single frame. Raises if the channel is gone."""
        ...

    async def recv(self) -> str | bytes:
        """Wait for the next frame. Raises once the channel is closed."""
        ...

    async def close(self) -> None:
        """Close the channel. Safe to call more than once."""
        ...


class Transport(Protocol):
    """Factory for connections to a fixed kind of endpoint."""

    name: str

    async def connect(self, url: str) -> Connection:
        """Open a connection, raising on failure."""
        ...
