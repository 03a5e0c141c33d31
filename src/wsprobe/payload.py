"""送信ペイロードの生成と受信メッセージの整形"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping

from .exceptions import EncodingError

INDENT = "  "

# Deeper replies are shown raw; indenting them would grow the output quadratically.
MAX_INDENT_DEPTH = 512

_TOKEN = re.compile(
    r"""[ \t\n\r]*(?:
        (?P<punct>[{}\[\],:])
      | (?P<string>"(?:[^"\\\x00-\x1f]|\\["\\/bfnrt]|\\u[0-9a-fA-F]{4})*")
      | (?P<number>-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?)
      | (?P<literal>true|false|null)
    )""",
    re.VERBOSE,
)
_WHITESPACE = " \t\n\r"
_CLOSERS = {"{": "}", "[": "]"}

# Parser states.
_VALUE, _VALUE_OR_END, _KEY, _KEY_OR_END, _COLON, _NEXT = range(6)


def build_payload(data: Mapping[str, str]) -> str:
    """キー/値の組を 1 つの JSON オブジェクトに変換する。

    キーはソートされるため、同じ内容なら挿入順に関係なく同じ文字列になる。

    Raises:
        EncodingError: JSON 変換に失敗した場合
    """
    try:
        return json.dumps(
            dict(data),
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
        )
    except (TypeError, ValueError) as e:
        raise EncodingError(f"marshal payload: {e}", cause=e) from e


def indent_json(text: str, indent: str = INDENT) -> str:
    """JSON テキストを検証し、トークンを変えずにインデントを付け直す。

    文字列・数値は受信したまま出力する。再帰を使わないため入れ子の深さで
    スタックを使い切ることはない。

    Raises:
        ValueError: 厳密な JSON でない、または入れ子が MAX_INDENT_DEPTH を超える場合
    """
    out: list[str] = []
    stack: list[str] = []
    state = _VALUE
    opened = False
    pos = 0

    def close(closer: str) -> None:
        nonlocal opened
        if not opened:
            out.append("\n" + indent * (len(stack) - 1))
        out.append(closer)
        opened = False
        stack.pop()

    while True:
        if state == _NEXT and not stack:
            if text[pos:].strip(_WHITESPACE):
                raise ValueError(f"invalid JSON: trailing data at offset {pos}")
            return "".join(out)

        match = _TOKEN.match(text, pos)
        if match is None:
            raise ValueError(f"invalid JSON at offset {pos}")
        pos = match.end()
        kind = match.lastgroup
        token = match.group(kind)
        is_closer = kind == "punct" and token in "}]"

        if opened and not is_closer:
            out.append("\n" + indent * len(stack))
            opened = False

        if state in (_VALUE, _VALUE_OR_END):
            if state == _VALUE_OR_END and token == "]" and kind == "punct":
                close(token)
                state = _NEXT
            elif kind == "punct" and token in "{[":
                if len(stack) >= MAX_INDENT_DEPTH:
                    raise ValueError(f"JSON nesting deeper than {MAX_INDENT_DEPTH}")
                out.append(token)
                stack.append(token)
                opened = True
                state = _KEY_OR_END if token == "{" else _VALUE_OR_END
            elif kind != "punct":
                out.append(token)
                state = _NEXT
            else:
                raise ValueError(f"invalid JSON: unexpected {token!r} at offset {match.start(kind)}")
        elif state in (_KEY, _KEY_OR_END):
            if state == _KEY_OR_END and token == "}" and kind == "punct":
                close(token)
                state = _NEXT
            elif kind == "string":
                out.append(token)
                state = _COLON
            else:
                raise ValueError(f"invalid JSON: expected object key at offset {match.start(kind)}")
        elif state == _COLON:
            if token != ":" or kind != "punct":
                raise ValueError(f"invalid JSON: expected ':' at offset {match.start(kind)}")
            out.append(": ")
            state = _VALUE
        else:
            if kind == "punct" and token == ",":
                out.append(",\n" + indent * len(stack))
                state = _KEY if stack[-1] == "{" else _VALUE
            elif is_closer and token == _CLOSERS[stack[-1]]:
                close(token)
            else:
                raise ValueError(f"invalid JSON: unexpected {token!r} at offset {match.start(kind)}")


def format_message(payload: str | bytes) -> str:
    """受信メッセージを表示用に整形する。

    JSON として解釈できればインデント付きで、できなければそのまま返す。
    """
    if isinstance(payload, bytes):
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError:
            return f"recv: {payload.decode('utf-8', errors='replace')}"
    else:
        text = payload
    try:
        return "recv:\n" + indent_json(text)
    except ValueError:
        return f"recv: {text}"
