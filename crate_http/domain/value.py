"""
Tagged cell values.

A ``Value`` holds exactly one native representation (its ``kind``) together with
the declared column type and column name. Accessors convert between
representations defensively and never raise: anything that cannot be converted
yields the target type's zero value.
"""
from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from .datatypes import CrateDataType


class ValueKind(Enum):
    INVALID = "invalid"
    NULL = "null"
    BOOL = "bool"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"


_INT_BITS = {ValueKind.INT16: 16, ValueKind.INT32: 32, ValueKind.INT64: 64}
_EMPTY_KINDS = (ValueKind.INVALID, ValueKind.NULL)

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_REAL_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_FLOAT32_MAX = 3.4028234663852886e38

Payload = Union[None, bool, int, float, str]


def wrap_int(value: int, bits: int) -> int:
    """Two's complement narrowing of ``value`` to a signed ``bits``-wide integer."""
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >> (bits - 1) else value


def fits_int(value: int, bits: int) -> bool:
    limit = 1 << (bits - 1)
    return -limit <= value < limit


def to_float32(value: float) -> float:
    """Round a Python float to the nearest single-precision value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _format_float32(value: float) -> str:
    if not math.isfinite(value):
        return repr(value)
    for digits in range(1, 10):
        text = f"{value:.{digits}g}"
        if to_float32(float(text)) == value:
            return repr(float(text))
    return repr(value)


def _parse_int(text: str, bits: int) -> int:
    match = _INT_PREFIX.match(text)
    if not match:
        return 0
    number = int(match.group(1))
    return number if fits_int(number, bits) else 0


def _parse_real(text: str, limit: float = math.inf) -> float:
    match = _REAL_PREFIX.match(text)
    if not match:
        return 0.0
    number = float(match.group(1))
    if not math.isfinite(number) or abs(number) > limit:
        return 0.0
    return number


@dataclass(frozen=True)
class Value:
    """One decoded cell.

    Fields:
        crate_type: Declared column type the value was decoded against.
        name: Column name; empty when the row is wider than the column list.
        kind: Which native representation ``data`` holds.
        data: The payload; ``None`` for INVALID and NULL.

    ``Value()`` is the invalid value: the type may be known but no value could be produced.
    A NULL value is the database NULL and is distinct from invalid.
    """
    crate_type: CrateDataType = field(default_factory=CrateDataType)
    name: str = ""
    kind: ValueKind = ValueKind.INVALID
    data: Any = None

    def __post_init__(self) -> None:
        kind = self.kind
        if kind in _EMPTY_KINDS:
            data: Payload = None
        elif kind is ValueKind.BOOL:
            data = bool(self.data)
        elif kind in _INT_BITS:
            data = wrap_int(int(self.data), _INT_BITS[kind])
        elif kind is ValueKind.FLOAT:
            data = to_float32(float(self.data))
        elif kind is ValueKind.DOUBLE:
            data = float(self.data)
        else:
            data = "" if self.data is None else str(self.data)
        object.__setattr__(self, "data", data)

    # --- constructors ---
    @classmethod
    def invalid(cls, crate_type: Optional[CrateDataType] = None) -> "Value":
        return cls(crate_type or CrateDataType())

    @classmethod
    def null(cls, crate_type: CrateDataType, name: str = "") -> "Value":
        return cls(crate_type, name, ValueKind.NULL)

    @classmethod
    def of_bool(cls, name: str, crate_type: CrateDataType, value: bool) -> "Value":
        return cls(crate_type, name, ValueKind.BOOL, value)

    @classmethod
    def of_int16(cls, name: str, crate_type: CrateDataType, value: int) -> "Value":
        return cls(crate_type, name, ValueKind.INT16, value)

    @classmethod
    def of_int32(cls, name: str, crate_type: CrateDataType, value: int) -> "Value":
        return cls(crate_type, name, ValueKind.INT32, value)

    @classmethod
    def of_int64(cls, name: str, crate_type: CrateDataType, value: int) -> "Value":
        return cls(crate_type, name, ValueKind.INT64, value)

    @classmethod
    def of_float(cls, name: str, crate_type: CrateDataType, value: float) -> "Value":
        return cls(crate_type, name, ValueKind.FLOAT, value)

    @classmethod
    def of_double(cls, name: str, crate_type: CrateDataType, value: float) -> "Value":
        return cls(crate_type, name, ValueKind.DOUBLE, value)

    @classmethod
    def of_string(cls, name: str, crate_type: CrateDataType, value: str) -> "Value":
        return cls(crate_type, name, ValueKind.STRING, value)

    # --- state ---
    def is_invalid(self) -> bool:
        return self.kind is ValueKind.INVALID

    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    @property
    def python_value(self) -> Payload:
        """The payload as a plain Python object (``None`` for invalid and NULL)."""
        return self.data

    # --- conversions ---
    def as_string(self) -> str:
        kind = self.kind
        if kind in _EMPTY_KINDS:
            return ""
        if kind is ValueKind.STRING:
            return self.data
        if kind is ValueKind.BOOL:
            return "true" if self.data else "false"
        if kind is ValueKind.FLOAT:
            return _format_float32(self.data)
        if kind is ValueKind.DOUBLE:
            return repr(self.data)
        return str(self.data)

    def as_int16(self) -> int:
        return self._as_integer(16)

    def as_int32(self) -> int:
        return self._as_integer(32)

    def as_int64(self) -> int:
        return self._as_integer(64)

    def as_double(self) -> float:
        kind = self.kind
        if kind in _EMPTY_KINDS:
            return 0.0
        if kind is ValueKind.STRING:
            return _parse_real(self.data)
        return float(self.data)

    def as_float(self) -> float:
        if self.kind is ValueKind.STRING:
            return to_float32(_parse_real(self.data, _FLOAT32_MAX))
        return to_float32(self.as_double())

    def as_bool(self) -> bool:
        kind = self.kind
        if kind in _EMPTY_KINDS:
            return False
        if kind is ValueKind.STRING:
            return self.data not in ("", "0", "false")
        return self.data != 0

    def _as_integer(self, bits: int) -> int:
        kind = self.kind
        if kind in _EMPTY_KINDS:
            return 0
        if kind is ValueKind.STRING:
            return _parse_int(self.data, bits)
        if kind in (ValueKind.FLOAT, ValueKind.DOUBLE):
            if not math.isfinite(self.data):
                return 0
            return wrap_int(int(self.data), bits)
        return wrap_int(int(self.data), bits)
