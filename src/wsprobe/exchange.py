"""1 回の送信と受信ループ"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from .client import WebsocketsClient, WsClient, check_tls_scheme
from .config import Options
from .duration import format_duration
from .exceptions import ReadTermination
from .payload import build_payload, format_message
from .types import CloseCode, ExchangeResult, WsMessage
from .urls import build_url

logger = structlog.get_logger(__name__)

ClientFactory = Callable[[str, Options], WsClient]


def default_client_factory(url: str, options: Options) -> WsClient:
    return WebsocketsClient(
        url,
        dial_timeout=options.dial_timeout,
        insecure_skip_verify=options.insecure_skip_verify,
    )


async def receive_loop(client: WsClient) -> int:
    """切断または読み込みエラーまで受信メッセージを表示し続ける。

    Returns:
        受信したメッセージ数
    """
    received = 0
    while True:
        try:
            msg = await client.receive()
        except ReadTermination as e:
            logger.info("read finished", error=str(e))
            return received
        print(format_message(msg.payload), flush=True)
        received += 1


async def run(options: Options, client_factory: ClientFactory | None = None) -> ExchangeResult:
    """接続してペイロードを 1 回送信し、応答を表示する。

    read_timeout 経過時は close フレームを送り、受信ループの終了を待つ。
    タイムアウトや切断はエラーではない。

    Raises:
        URLError: URL が不正な場合
        SchemeMismatchError: wss 以外で TLS 検証スキップが指定された場合
        EncodingError: ペイロード変換に失敗した場合
        ConnectError: 接続に失敗した場合
        SendError: 送信に失敗した場合
    """
    url = build_url(options.url, options.path, options.port)
    check_tls_scheme(url, options.insecure_skip_verify)
    payload = build_payload(options.data)

    client = (client_factory or default_client_factory)(url, options)
    await client.connect()
    try:
        if client.handshake_status:
            logger.info("connected", url=url, status=client.handshake_status)

        await client.send(WsMessage.text(payload))
        print(f"sent: {payload}", flush=True)

        receiver = asyncio.create_task(receive_loop(client))
        timed_out = False
        if options.read_timeout > 0:
            done, _ = await asyncio.wait({receiver}, timeout=options.read_timeout)
            if not done:
                timed_out = True
                await client.close(CloseCode.NORMAL_CLOSURE, "timeout")
                logger.info(
                    "read timeout elapsed; connection closed",
                    timeout=format_duration(options.read_timeout),
                )
        received = await receiver
    finally:
        await client.disconnect()

    return ExchangeResult(received=received, timed_out=timed_out)
