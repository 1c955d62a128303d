"""
Result decoding for ``/_sql?types`` replies.

A ``Result`` is built once from a ``RawResult``: the body is parsed, server and
bulk errors are classified into ``error_string``, and on success the column
metadata and verbatim row fragments are extracted. Rows are decoded into
``Record`` objects only when accessed.
"""
from __future__ import annotations

import json
from typing import Any, List, Tuple

from . import json_codec
from .datatypes import CrateDataType, DataType
from .raw_result import RawResult, bulk_error_positions
from .record import Record


def describe_error(error: Any) -> str:
    """Format a reply's ``error`` member as ``[component] message (code)``.

    Missing or mistyped sub-fields degrade to fixed fallback text.
    """
    if not isinstance(error, dict):
        return "Unknown error."
    text = ""
    if "component" in error:
        component = error["component"]
        text += f"[{component}] " if isinstance(component, str) else "[unknown] "
    else:
        text += "[crate] "
    message = error.get("message")
    text += message if isinstance(message, str) else "Unknown error."
    if "code" in error and json_codec.is_integer(error["code"]):
        text += f" ({error['code']})"
    return text


def _column_type(entry: Any) -> CrateDataType:
    code = None
    if json_codec.is_integer(entry):
        code = entry
    elif isinstance(entry, list) and entry and json_codec.is_integer(entry[0]):
        code = entry[0]
    data_type = DataType.convert(code) if code is not None else DataType.NOT_SUPPORTED
    return CrateDataType(data_type, json_codec.dumps(entry))


class Result:
    """Decoded reply of a SQL request.

    ``bool(result)`` is true when the reply carried no error.
    """

    __slots__ = ("_raw", "_error", "_duration", "_row_count", "_cols", "_col_types", "_rows")

    def __init__(self, raw: RawResult) -> None:
        self._raw = raw
        self._error = ""
        self._duration = 0.0
        self._row_count = 0
        self._cols: Tuple[str, ...] = ()
        self._col_types: Tuple[CrateDataType, ...] = ()
        self._rows: Tuple[str, ...] = ()
        self._decode(raw.reply)

    def _decode(self, reply: str) -> None:
        try:
            doc = json_codec.loads(reply)
        except json.JSONDecodeError as exc:
            self._error = f"[json] parse error at offset {exc.pos}: {exc.msg}"
            return

        if json_codec.has_member(doc, "error"):
            self._error = describe_error(doc["error"])
            return

        failed = bulk_error_positions(doc)
        if failed:
            self._error = f"[crate] Error in bulk arguments [{', '.join(str(i) for i in failed)}]."
            return

        if not isinstance(doc, dict):
            return
        row_count = doc.get("rowcount")
        if json_codec.is_integer(row_count):
            self._row_count = row_count
        duration = doc.get("duration")
        if json_codec.is_number(duration):
            self._duration = float(duration)
        cols = doc.get("cols")
        if isinstance(cols, list):
            self._cols = tuple(c if isinstance(c, str) else "" for c in cols)
        col_types = doc.get("col_types")
        if isinstance(col_types, list):
            self._col_types = tuple(_column_type(t) for t in col_types)
        rows = doc.get("rows")
        if isinstance(rows, list):
            self._rows = tuple(json_codec.dumps(r) for r in rows)

    def has_error(self) -> bool:
        return bool(self._error)

    def __bool__(self) -> bool:
        return not self.has_error()

    @property
    def error_string(self) -> str:
        return self._error

    @property
    def raw_result(self) -> RawResult:
        return self._raw

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def row_count(self) -> int:
        return self._row_count

    @property
    def cols(self) -> List[str]:
        return list(self._cols)

    @property
    def col_types(self) -> List[CrateDataType]:
        return list(self._col_types)

    @property
    def rows(self) -> List[str]:
        return list(self._rows)

    def record_size(self) -> int:
        return len(self._rows)

    def record(self, pos: int) -> Record:
        """Decoded row at ``pos``; an empty Record when out of range."""
        if 0 <= pos < len(self._rows):
            return Record(self._rows[pos], self._cols, self._col_types)
        return Record()

    def records(self) -> List[Record]:
        return [self.record(i) for i in range(len(self._rows))]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return all(getattr(self, s) == getattr(other, s) for s in self.__slots__)

    def __repr__(self) -> str:
        if self._error:
            return f"Result(error={self._error!r})"
        return f"Result(cols={list(self._cols)!r}, rows={len(self._rows)}, rowcount={self._row_count})"
