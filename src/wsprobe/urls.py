"""接続先 URL の組み立て"""

from __future__ import annotations

from urllib.parse import quote, urlsplit, urlunsplit

from .exceptions import URLError

WS_SCHEMES = ("ws", "wss")

# RFC 3986 pchar plus "/", leaving existing escapes intact.
_PATH_SAFE = "/:@!$&'()*+,;=%~"


def build_url(raw_url: str, path: str, port: int = 0) -> str:
    """ベース URL・パス・ポートから WebSocket URL を組み立てる。

    Args:
        raw_url: ベース URL (例: ws://localhost:8080)
        path: パス。先頭の "/" は省略可
        port: 0 より大きい場合はホストのポートを置き換える

    Raises:
        URLError: スキームやホストが欠けている、または ws/wss 以外の場合
    """
    try:
        parts = urlsplit(raw_url)
        # Accessing .port validates the port component.
        parts.port
    except ValueError as e:
        raise URLError(f"parse url: {e}", cause=e) from e

    if not parts.scheme:
        raise URLError("url must include scheme, e.g. ws://host or wss://host")
    if parts.scheme not in WS_SCHEMES:
        raise URLError(f"unsupported scheme {parts.scheme!r} (use ws:// or wss://)")
    if not parts.hostname:
        raise URLError("url must include host")

    if not path.startswith("/"):
        path = "/" + path

    netloc = parts.netloc
    if port > 0:
        netloc = _replace_port(netloc, port)

    return urlunsplit((parts.scheme, netloc, quote(path, safe=_PATH_SAFE), parts.query, parts.fragment))


def _replace_port(netloc: str, port: int) -> str:
    userinfo, at, hostport = netloc.rpartition("@")
    if hostport.startswith("["):
        host = hostport[: hostport.index("]") + 1]
    else:
        host = hostport.rsplit(":", 1)[0] if ":" in hostport else hostport
    return f"{userinfo}{at}{host}:{port}"
