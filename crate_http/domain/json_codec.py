"""
JSON helpers for reply decoding.

Replies are parsed with the stdlib ``json`` module. Floating-point tokens are kept
as ``RawNumber`` (a float that remembers its source text) so fragments can be
re-serialized verbatim, e.g. a row cell ``1.20`` is written back as ``1.20``.

Parsing is strict: ``NaN``/``Infinity`` literals and nesting deeper than the
parser supports are reported as ``json.JSONDecodeError`` like any other
malformed input.
"""
from __future__ import annotations

import json
from typing import Any, List


class RawNumber(float):
    """Float parsed from a JSON token, carrying the token's original spelling."""

    text: str

    def __new__(cls, text: str) -> "RawNumber":
        obj = super().__new__(cls, text)
        obj.text = text
        return obj


class _Text(str):
    """Output text queued between values while serializing."""


def loads(text: str) -> Any:
    """Parse JSON text; raises ``json.JSONDecodeError`` on malformed input."""

    def reject_constant(name: str) -> Any:
        raise json.JSONDecodeError(f"Invalid literal {name}", text, max(text.find(name), 0))

    try:
        return json.loads(text, parse_float=RawNumber, parse_constant=reject_constant)
    except RecursionError as exc:
        raise json.JSONDecodeError(f"Nesting too deep ({exc})", text, 0) from exc


def dumps(value: Any) -> str:
    """Compact serialization of a parsed value, keeping float tokens verbatim.

    Iterative, so arbitrarily deep values serialize without hitting the
    interpreter's recursion limit.
    """
    out: List[str] = []
    pending: List[Any] = [value]
    while pending:
        item = pending.pop()
        if type(item) is _Text:
            out.append(item)
        elif isinstance(item, RawNumber):
            out.append(item.text)
        elif isinstance(item, dict):
            entries = list(item.items())
            pending.append(_Text("}"))
            for i in range(len(entries) - 1, -1, -1):
                key, member = entries[i]
                pending.append(member)
                pending.append(_Text(("," if i else "") + _string(key) + ":"))
            pending.append(_Text("{"))
        elif isinstance(item, list):
            pending.append(_Text("]"))
            for i in range(len(item) - 1, -1, -1):
                pending.append(item[i])
                if i:
                    pending.append(_Text(","))
            pending.append(_Text("["))
        else:
            out.append(json.dumps(item, ensure_ascii=False))
    return "".join(out)


def _string(key: Any) -> str:
    return json.dumps(str(key), ensure_ascii=False)


def is_integer(value: Any) -> bool:
    """True for JSON integer tokens (bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def has_member(doc: Any, key: str) -> bool:
    return isinstance(doc, dict) and key in doc
