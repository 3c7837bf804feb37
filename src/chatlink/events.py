"""Events consumed by the connection supervisor, one at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from chatlink.channels.base import Connection
    from chatlink.protocol import Payload


@dataclass(frozen=True, slots=True)
class StartRequested:
    pass


@dataclass(frozen=True, slots=True)
class Opened:
    generation: int
    connection: Connection


@dataclass(frozen=True, slots=True)
class FrameReceived:
    generation: int
    frame: str | bytes


@dataclass(frozen=True, slots=True)
class Closed:
    generation: int
    reason: str


@dataclass(frozen=True, slots=True)
class ProbeTick:
    generation: int


@dataclass(frozen=True, slots=True)
class RetryTick:
    pass


@dataclass(frozen=True, slots=True)
class Outbound:
    payload: Payload


@dataclass(frozen=True, slots=True)
class Shutdown:
    pass


Event = Union[StartRequested, Opened, FrameReceived, Closed, ProbeTick, RetryTick, Outbound, Shutdown]
