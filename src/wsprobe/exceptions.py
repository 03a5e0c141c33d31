"""wsprobe の例外型定義"""

from __future__ import annotations


class WsProbeError(Exception):
    """wsprobe のエラー基底クラス。"""

    default_code: str = "WSPROBE_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class WsProbeErrorCodes:
    """WsProbeError のエラーコード定数。"""

    CONFIG: str = "CONFIG_ERROR"
    URL: str = "URL_ERROR"
    SCHEME_MISMATCH: str = "SCHEME_MISMATCH"
    ENCODING: str = "ENCODING_ERROR"
    CONNECT: str = "CONNECT_ERROR"
    SEND: str = "SEND_ERROR"
    READ_TERMINATED: str = "READ_TERMINATED"


class ConfigError(WsProbeError):
    """引数・設定の検証エラー。"""

    default_code = WsProbeErrorCodes.CONFIG


class URLError(ConfigError):
    """接続先 URL の組み立てに失敗した場合のエラー。"""

    default_code = WsProbeErrorCodes.URL


class SchemeMismatchError(WsProbeError):
    """wss 以外の URL に TLS 検証スキップが指定された場合のエラー。"""

    default_code = WsProbeErrorCodes.SCHEME_MISMATCH


class EncodingError(WsProbeError):
    """ペイロードの JSON 変換に失敗した場合のエラー。"""

    default_code = WsProbeErrorCodes.ENCODING


class ConnectError(WsProbeError):
    """ハンドシェイク・タイムアウト・ネットワークエラーによる接続失敗。"""

    default_code = WsProbeErrorCodes.CONNECT


class SendError(WsProbeError):
    """接続後の送信失敗。"""

    default_code = WsProbeErrorCodes.SEND


class ReadTermination(WsProbeError):
    """受信ループの終了（正常クローズを含む）。"""

    default_code = WsProbeErrorCodes.READ_TERMINATED
