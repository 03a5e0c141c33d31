"""WebSocket クライアントのユニットテスト"""

import pytest

from conftest import unused_port, wait_for_close
from wsprobe.client import InMemoryWsClient, WebsocketsClient, check_tls_scheme
from wsprobe.exceptions import (
    ConnectError,
    ReadTermination,
    SchemeMismatchError,
    SendError,
    WsProbeErrorCodes,
)
from wsprobe.types import CloseCode, ConnectionState, MessageType, WsMessage


async def test_in_memory_connect_and_disconnect() -> None:
    client = InMemoryWsClient()
    assert client.state == ConnectionState.DISCONNECTED
    assert client.handshake_status is None

    await client.connect()
    assert client.state == ConnectionState.CONNECTED
    assert client.handshake_status == "101 Switching Protocols"

    await client.disconnect()
    assert client.state == ConnectionState.DISCONNECTED


async def test_in_memory_send_and_receive() -> None:
    client = InMemoryWsClient()
    await client.connect()

    client.inject_message(WsMessage.text("hello"))
    msg = await client.receive()
    assert msg.type == MessageType.TEXT
    assert msg.payload == "hello"

    await client.send(WsMessage.text("world"))
    assert client.get_sent_messages() == [WsMessage.text("world")]


async def test_in_memory_send_while_disconnected() -> None:
    client = InMemoryWsClient()
    with pytest.raises(SendError) as exc_info:
        await client.send(WsMessage.text("hello"))
    assert exc_info.value.code == WsProbeErrorCodes.SEND


async def test_in_memory_receive_while_disconnected() -> None:
    client = InMemoryWsClient()
    with pytest.raises(ReadTermination):
        await client.receive()


async def test_in_memory_double_connect() -> None:
    client = InMemoryWsClient()
    await client.connect()
    with pytest.raises(ConnectError):
        await client.connect()


async def test_in_memory_close_ends_receive() -> None:
    """close() で待機中の receive() が ReadTermination で終わること。"""
    client = InMemoryWsClient()
    await client.connect()
    await client.close(CloseCode.NORMAL_CLOSURE, "timeout")
    with pytest.raises(ReadTermination, match="timeout"):
        await client.receive()
    assert client.close_code == 1000
    assert client.close_reason == "timeout"
    assert client.state == ConnectionState.DISCONNECTED


async def test_in_memory_remote_close_after_messages() -> None:
    client = InMemoryWsClient()
    await client.connect()
    client.inject_message(WsMessage.binary(b"\x01"))
    client.close_remote()
    msg = await client.receive()
    assert msg.type == MessageType.BINARY
    with pytest.raises(ReadTermination):
        await client.receive()


def test_check_tls_scheme() -> None:
    check_tls_scheme("wss://host/ws", True)
    check_tls_scheme("ws://host/ws", False)
    with pytest.raises(SchemeMismatchError) as exc_info:
        check_tls_scheme("ws://host/ws", True)
    assert exc_info.value.code == WsProbeErrorCodes.SCHEME_MISMATCH


def test_websockets_client_rejects_insecure_on_ws() -> None:
    """ネットワーク接続前に SchemeMismatchError が発生すること。"""
    with pytest.raises(SchemeMismatchError):
        WebsocketsClient("ws://127.0.0.1:1/ws", insecure_skip_verify=True)


async def test_websockets_client_connect_refused() -> None:
    client = WebsocketsClient(f"ws://127.0.0.1:{unused_port()}/ws", dial_timeout=2.0)
    with pytest.raises(ConnectError) as exc_info:
        await client.connect()
    assert exc_info.value.code == WsProbeErrorCodes.CONNECT
    assert exc_info.value.__cause__ is not None
    assert client.state == ConnectionState.DISCONNECTED


async def test_websockets_client_send_before_connect() -> None:
    client = WebsocketsClient("ws://127.0.0.1:1/ws")
    with pytest.raises(SendError):
        await client.send(WsMessage.text("x"))


async def test_websockets_client_round_trip(ws_peer) -> None:
    """実サーバーとの送受信と close ハンドシェイク。"""

    def script(ws, peer) -> None:
        ws.send('{"x":1}')
        wait_for_close(ws, peer)

    peer = ws_peer(script)
    client = WebsocketsClient(f"{peer.url}/echo")
    await client.connect()
    assert client.state == ConnectionState.CONNECTED
    assert client.handshake_status == "101 Switching Protocols"

    await client.send(WsMessage.text("ping"))
    msg = await client.receive()
    assert msg == WsMessage.text('{"x":1}')

    await client.close(CloseCode.NORMAL_CLOSURE, "timeout")
    with pytest.raises(ReadTermination):
        await client.receive()
    await client.disconnect()
    assert client.state == ConnectionState.DISCONNECTED

    assert peer.wait_closed()
    assert peer.paths == ["/echo"]
    assert peer.received == ["ping"]
    assert peer.close_frames == [(1000, "timeout")]


async def test_websockets_client_remote_close(ws_peer) -> None:
    def script(ws, peer) -> None:
        ws.close()

    peer = ws_peer(script)
    client = WebsocketsClient(f"{peer.url}/ws")
    await client.connect()
    await client.send(WsMessage.text("hi"))
    with pytest.raises(ReadTermination):
        await client.receive()
    await client.disconnect()
    assert peer.wait_closed()
