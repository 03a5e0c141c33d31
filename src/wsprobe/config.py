"""設定型定義と引数の変換"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from .exceptions import ConfigError, WsProbeErrorCodes

DEFAULT_DIAL_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 10.0


@dataclass
class LogConfig:
    """ログ設定。"""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"


class Options(BaseModel):
    """1 回の送受信に必要な設定。生成後は変更不可。

    タイムアウトは秒単位。read_timeout=0 は無制限に待つ。
    """

    model_config = ConfigDict(frozen=True)

    url: str
    path: str
    port: int = Field(default=0, ge=0, le=65535)
    dial_timeout: float = Field(default=DEFAULT_DIAL_TIMEOUT, ge=0)
    read_timeout: float = Field(default=DEFAULT_READ_TIMEOUT, ge=0)
    insecure_skip_verify: bool = False
    data: dict[str, str] = Field(default_factory=dict)

    @field_validator("url", "path")
    @classmethod
    def _required(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            raise ValueError(f"-{info.field_name} is required")
        return value


def load_options(values: dict[str, Any]) -> Options:
    """辞書から Options を生成する。

    Raises:
        ConfigError: 検証に失敗した場合
    """
    try:
        return Options.model_validate(values)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(
            code=WsProbeErrorCodes.CONFIG,
            message=f"invalid options: {details}",
            cause=e,
        ) from e


def _to_utf8(text: str) -> str:
    # Undecodable argv bytes arrive as lone surrogates; send them as U+FFFD.
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def parse_pairs(args: Iterable[str]) -> dict[str, str]:
    """Name=Value 形式の引数を辞書に変換する。

    最初の "=" でのみ分割する。同じ名前が複数ある場合は後勝ち。
    UTF-8 として不正なバイトは U+FFFD に置き換える。

    Raises:
        ConfigError: "=" を含まない、または名前が空の場合
    """
    data: dict[str, str] = {}
    for arg in args:
        if "=" not in arg:
            raise ConfigError(f"invalid data {arg!r} (want Name=Value)")
        name, value = arg.split("=", 1)
        if not name.strip():
            raise ConfigError(f"missing name in {arg!r}")
        data[_to_utf8(name)] = _to_utf8(value)
    return data
