"""共通フィクスチャ"""

from __future__ import annotations

import socket
import threading
from collections.abc import Callable, Generator
from dataclasses import dataclass, field

import pytest
from websockets.exceptions import ConnectionClosed
from websockets.sync.server import Server, ServerConnection, serve

from wsprobe.config import LogConfig
from wsprobe.logger import configure_logging


@pytest.fixture(autouse=True, scope="session")
def _configure_logging() -> None:
    configure_logging(LogConfig(level="DEBUG", format="text"))


@dataclass
class Peer:
    """テスト用 WebSocket サーバーが受け取った内容。"""

    url: str = ""
    paths: list[str] = field(default_factory=list)
    received: list[str] = field(default_factory=list)
    close_frames: list[tuple[int, str]] = field(default_factory=list)
    closed: threading.Event = field(default_factory=threading.Event)

    def wait_closed(self, timeout: float = 5.0) -> bool:
        return self.closed.wait(timeout)


Script = Callable[[ServerConnection, Peer], None]


def wait_for_close(ws: ServerConnection, peer: Peer) -> None:
    """クライアントが切断するまで受信を続け、close フレームを記録する。"""
    try:
        while True:
            ws.recv()
    except ConnectionClosed as e:
        if e.rcvd is not None:
            peer.close_frames.append((e.rcvd.code, e.rcvd.reason))


@pytest.fixture
def ws_peer() -> Generator[Callable[[Script], Peer], None, None]:
    """スクリプトに従って応答する WebSocket サーバーを別スレッドで起動する。"""
    servers: list[tuple[Server, threading.Thread]] = []

    def start(script: Script) -> Peer:
        peer = Peer()

        def handler(ws: ServerConnection) -> None:
            peer.paths.append(ws.request.path)
            try:
                peer.received.append(ws.recv())
                script(ws, peer)
            except ConnectionClosed:
                pass
            finally:
                peer.closed.set()

        server = serve(handler, "127.0.0.1", 0)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append((server, thread))
        port = server.socket.getsockname()[1]
        peer.url = f"ws://127.0.0.1:{port}"
        return peer

    yield start

    for server, thread in servers:
        server.shutdown()
        thread.join(timeout=5)


def unused_port() -> int:
    """接続を受け付けないローカルポートを返す。"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
