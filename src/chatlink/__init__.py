"""Resilient chat client over a persistent WebSocket channel."""

from chatlink.backoff import BackoffState
from chatlink.config import Settings
from chatlink.monitor import LivenessMonitor
from chatlink.protocol import PING, PONG, Payload, ProtocolError, decode_frame, encode_payload
from chatlink.supervisor import ChannelState, ConnectionSupervisor

__all__ = [
    "PING",
    "PONG",
    "BackoffState",
    "ChannelState",
    "ConnectionSupervisor",
    "LivenessMonitor",
    "Payload",
    "ProtocolError",
    "Settings",
    "decode_frame",
    "encode_payload",
]
