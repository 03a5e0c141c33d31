"""wsprobe: send one JSON message over a WebSocket and print the replies."""

from .client import InMemoryWsClient, WebsocketsClient, WsClient, check_tls_scheme
from .config import LogConfig, Options, load_options, parse_pairs
from .duration import format_duration, parse_duration
from .exceptions import (
    ConfigError,
    ConnectError,
    EncodingError,
    ReadTermination,
    SchemeMismatchError,
    SendError,
    URLError,
    WsProbeError,
    WsProbeErrorCodes,
)
from .exchange import run
from .logger import configure_logging
from .payload import build_payload, format_message
from .types import CloseCode, ConnectionState, ExchangeResult, MessageType, WsMessage
from .urls import build_url

__all__ = [
    "CloseCode",
    "ConfigError",
    "ConnectError",
    "ConnectionState",
    "EncodingError",
    "ExchangeResult",
    "InMemoryWsClient",
    "LogConfig",
    "MessageType",
    "Options",
    "ReadTermination",
    "SchemeMismatchError",
    "SendError",
    "URLError",
    "WebsocketsClient",
    "WsClient",
    "WsMessage",
    "WsProbeError",
    "WsProbeErrorCodes",
    "build_payload",
    "build_url",
    "check_tls_scheme",
    "configure_logging",
    "format_duration",
    "format_message",
    "load_options",
    "parse_duration",
    "parse_pairs",
    "run",
]
