"""WebSocket types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto


class MessageType(Enum):
    """WebSocket message type."""

    TEXT = auto()
    BINARY = auto()


class CloseCode(IntEnum):
    """WebSocket close status codes used by wsprobe."""

    NORMAL_CLOSURE = 1000


@dataclass(frozen=True)
class WsMessage:
    """WebSocket message."""

    type: MessageType
    payload: str | bytes = b""

    @staticmethod
    def text(s: str) -> WsMessage:
        return WsMessage(type=MessageType.TEXT, payload=s)

    @staticmethod
    def binary(data: bytes) -> WsMessage:
        return WsMessage(type=MessageType.BINARY, payload=data)


class ConnectionState(Enum):
    """WebSocket connection state."""

    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    CLOSING = auto()


@dataclass(frozen=True)
class ExchangeResult:
    """Outcome of one send-and-receive run."""

    received: int = 0
    timed_out: bool = False
