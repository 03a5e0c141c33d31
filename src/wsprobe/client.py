"""WebSocket client abstraction."""

from __future__ import annotations

import asyncio
import ssl
from abc import ABC, abstractmethod

import structlog
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import WebSocketException

from .exceptions import ConnectError, ReadTermination, SchemeMismatchError, SendError
from .types import CloseCode, ConnectionState, WsMessage

logger = structlog.get_logger(__name__)

# Deadline for the closing handshake started by close().
CLOSE_TIMEOUT_SECONDS = 1.0


def check_tls_scheme(url: str, insecure_skip_verify: bool) -> None:
    """Reject a TLS verification override on a URL that does not use TLS."""
    if insecure_skip_verify and not url.startswith("wss://"):
        raise SchemeMismatchError("-insecure-skip-verify is only valid with wss:// URLs")


class WsClient(ABC):
    """Abstract WebSocket client."""

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    async def send(self, message: WsMessage) -> None:
        ...

    @abstractmethod
    async def receive(self) -> WsMessage:
        """Wait for the next message.

        Raises:
            ReadTermination: the connection closed or the read failed.
        """

    @abstractmethod
    async def close(self, code: int = CloseCode.NORMAL_CLOSURE, reason: str = "") -> None:
        """Start the closing handshake. Pending receive() calls end with ReadTermination."""

    @property
    @abstractmethod
    def state(self) -> ConnectionState:
        ...

    @property
    @abstractmethod
    def handshake_status(self) -> str | None:
        ...


class WebsocketsClient(WsClient):
    """WsClient backed by the websockets library."""

    def __init__(
        self,
        url: str,
        dial_timeout: float = 10.0,
        insecure_skip_verify: bool = False,
        close_timeout: float = CLOSE_TIMEOUT_SECONDS,
    ) -> None:
        check_tls_scheme(url, insecure_skip_verify)
        self._url = url
        self._dial_timeout = dial_timeout
        self._insecure_skip_verify = insecure_skip_verify
        self._close_timeout = close_timeout
        self._conn: ClientConnection | None = None
        self._state = ConnectionState.DISCONNECTED

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def handshake_status(self) -> str | None:
        if self._conn is None or self._conn.response is None:
            return None
        response = self._conn.response
        return f"{response.status_code} {response.reason_phrase}"

    def _ssl_context(self) -> ssl.SSLContext | None:
        if not self._url.startswith("wss://"):
            return None
        context = ssl.create_default_context()
        if self._insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    async def connect(self) -> None:
        if self._state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
            raise ConnectError(f"dial {self._url}: already connected")
        self._state = ConnectionState.CONNECTING
        try:
            self._conn = await connect(
                self._url,
                open_timeout=self._dial_timeout or None,
                # Also bounds the wait for the peer's close reply after close().
                close_timeout=self._close_timeout,
                ping_interval=None,
                max_size=None,
                ssl=self._ssl_context(),
            )
        except (WebSocketException, OSError, TimeoutError) as e:
            self._state = ConnectionState.DISCONNECTED
            raise ConnectError(f"dial {self._url}: {e}", cause=e) from e
        self._state = ConnectionState.CONNECTED

    async def disconnect(self) -> None:
        if self._conn is None:
            return
        self._state = ConnectionState.CLOSING
        await self._conn.close()
        self._state = ConnectionState.DISCONNECTED

    async def send(self, message: WsMessage) -> None:
        if self._conn is None or self._state != ConnectionState.CONNECTED:
            raise SendError("send message: not connected")
        try:
            await self._conn.send(message.payload)
        except (WebSocketException, OSError) as e:
            raise SendError(f"send message: {e}", cause=e) from e

    async def receive(self) -> WsMessage:
        if self._conn is None:
            raise ReadTermination("not connected")
        try:
            data = await self._conn.recv()
        except (WebSocketException, OSError) as e:
            raise ReadTermination(str(e), cause=e) from e
        if isinstance(data, bytes):
            return WsMessage.binary(data)
        return WsMessage.text(data)

    async def close(self, code: int = CloseCode.NORMAL_CLOSURE, reason: str = "") -> None:
        if self._conn is None:
            return
        self._state = ConnectionState.CLOSING
        try:
            await self._conn.close(code, reason)
        except (WebSocketException, OSError) as e:
            logger.debug("close failed", error=str(e))


class InMemoryWsClient(WsClient):
    """In-memory WebSocket client for testing.

    receive() returns injected messages in order and waits when none are
    queued. close_remote() makes receive() fail once the queue is drained,
    as if the peer had closed the connection.
    """

    def __init__(self, status: str = "101 Switching Protocols") -> None:
        self._state = ConnectionState.DISCONNECTED
        self._status = status
        self._handshake_status: str | None = None
        self._recv_queue: asyncio.Queue[WsMessage | None] = asyncio.Queue()
        self._sent_messages: list[WsMessage] = []
        self.close_code: int | None = None
        self.close_reason: str | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def handshake_status(self) -> str | None:
        return self._handshake_status

    async def connect(self) -> None:
        if self._state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
            raise ConnectError("dial in-memory: already connected")
        self._state = ConnectionState.CONNECTED
        self._handshake_status = self._status

    async def disconnect(self) -> None:
        self._state = ConnectionState.DISCONNECTED

    async def send(self, message: WsMessage) -> None:
        if self._state != ConnectionState.CONNECTED:
            raise SendError("send message: not connected")
        self._sent_messages.append(message)

    async def receive(self) -> WsMessage:
        if self._state == ConnectionState.DISCONNECTED:
            raise ReadTermination("not connected")
        msg = await self._recv_queue.get()
        if msg is None:
            self._state = ConnectionState.DISCONNECTED
            code = self.close_code or CloseCode.NORMAL_CLOSURE
            raise ReadTermination(f"received {int(code)} ({self.close_reason or 'OK'})")
        return msg

    async def close(self, code: int = CloseCode.NORMAL_CLOSURE, reason: str = "") -> None:
        self._state = ConnectionState.CLOSING
        self.close_code = code
        self.close_reason = reason
        self._recv_queue.put_nowait(None)

    def inject_message(self, msg: WsMessage) -> None:
        self._recv_queue.put_nowait(msg)

    def close_remote(self) -> None:
        self._recv_queue.put_nowait(None)

    def get_sent_messages(self) -> list[WsMessage]:
        return list(self._sent_messages)
