"""コマンドラインインターフェース"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

import structlog

from .config import LogConfig, Options, load_options, parse_pairs
from .duration import parse_duration
from .exceptions import ConfigError, WsProbeError
from .exchange import run
from .logger import configure_logging

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

USAGE = "%(prog)s -url ws://host -path /ws [-port 8080] [-insecure-skip-verify] Name=Value [More=Data]"


def _duration(value: str) -> float:
    try:
        return parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wsprobe",
        usage=USAGE,
        description="Send one JSON message over a WebSocket and print the replies.",
        allow_abbrev=False,
    )
    parser.add_argument("-url", "--url", default="", help="WebSocket base URL (e.g. ws://localhost:8080)")
    parser.add_argument("-path", "--path", default="", help="WebSocket path (e.g. /ws)")
    parser.add_argument(
        "-port", "--port", type=int, default=0, help="Port to override in the WebSocket URL (optional)"
    )
    parser.add_argument(
        "-dial-timeout",
        "--dial-timeout",
        type=_duration,
        default="10s",
        metavar="DURATION",
        help="How long to wait when establishing the connection (default: 10s)",
    )
    parser.add_argument(
        "-read-timeout",
        "--read-timeout",
        type=_duration,
        default="10s",
        metavar="DURATION",
        help="How long to wait for responses after sending; 0 waits indefinitely (default: 10s)",
    )
    parser.add_argument(
        "-insecure-skip-verify",
        "--insecure-skip-verify",
        action="store_true",
        help="Skip TLS certificate verification (for wss://; testing only)",
    )
    parser.add_argument(
        "-log-level",
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Diagnostics level (default: INFO)",
    )
    parser.add_argument(
        "-log-format",
        "--log-format",
        default="text",
        choices=["text", "json"],
        help="Diagnostics format on stderr (default: text)",
    )
    parser.add_argument("data", nargs="*", metavar="Name=Value", help="Members of the JSON message")
    return parser


def parse_options(
    parser: argparse.ArgumentParser, argv: Sequence[str] | None = None
) -> tuple[Options, LogConfig]:
    """コマンドライン引数を Options と LogConfig に変換する。

    Raises:
        ConfigError: 必須引数の不足や Name=Value の形式不正
    """
    args = parser.parse_args(argv)
    if not args.url:
        raise ConfigError("-url is required")
    if not args.path:
        raise ConfigError("-path is required")

    options = load_options(
        {
            "url": args.url,
            "path": args.path,
            "port": args.port,
            "dial_timeout": args.dial_timeout,
            "read_timeout": args.read_timeout,
            "insecure_skip_verify": args.insecure_skip_verify,
            "data": parse_pairs(args.data),
        }
    )
    return options, LogConfig(level=args.log_level, format=args.log_format)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        options, log_config = parse_options(parser, argv)
    except ConfigError as e:
        print(f"argument error: {e}", file=sys.stderr)
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    configure_logging(log_config)
    try:
        asyncio.run(run(options))
    except WsProbeError as e:
        logger.error("run failed", error=str(e), code=e.code)
        return EXIT_RUNTIME_ERROR
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    return EXIT_OK
