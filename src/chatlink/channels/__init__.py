"""Transports the connection supervisor can run over."""

from chatlink.channels.base import Connection, Transport
from chatlink.channels.websocket import WebSocketTransport

__all__ = ["Connection", "Transport", "WebSocketTransport"]
