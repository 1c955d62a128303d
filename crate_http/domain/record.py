from __future__ import annotations

import json
from typing import Any, Iterator, Sequence, Tuple, Union

from . import json_codec
from .datatypes import CrateDataType, DataType
from .value import Value, fits_int

_UNKNOWN_TYPE = CrateDataType(DataType.NOT_SUPPORTED)


def decode_cell(token: Any, name: str, crate_type: CrateDataType) -> Value:
    """Decode one parsed JSON cell into a Value, using the declared type as a hint.

    Integer and floating-point tokens get native storage only when the declared
    type asks for that token kind; every other combination becomes a string
    value holding the token's JSON text, so no cell is ever dropped or truncated.
    """
    declared = crate_type.type
    if json_codec.is_integer(token):
        if declared in (DataType.BYTE, DataType.SHORT) and fits_int(token, 32):
            return Value.of_int16(name, crate_type, token)
        if declared is DataType.INTEGER and fits_int(token, 32):
            return Value.of_int32(name, crate_type, token)
        if declared in (DataType.LONG, DataType.TIMESTAMP) and fits_int(token, 64):
            return Value.of_int64(name, crate_type, token)
    elif isinstance(token, float):
        if declared is DataType.DOUBLE:
            return Value.of_double(name, crate_type, token)
        if declared is DataType.FLOAT:
            return Value.of_float(name, crate_type, token)
    elif token is None:
        return Value.null(crate_type, name)
    elif isinstance(token, str):
        return Value.of_string(name, crate_type, token)
    elif isinstance(token, bool):
        return Value.of_bool(name, crate_type, token)
    return Value.of_string(name, crate_type, json_codec.dumps(token))


class Record:
    """One result row decoded into Values.

    ``data`` is the row's JSON array text. Rows longer than ``names``/``types``
    get empty names and NOT_SUPPORTED types for the extra cells; malformed or
    non-array data gives an empty record.
    """

    __slots__ = ("_values",)

    def __init__(
        self,
        data: str = "",
        names: Sequence[str] = (),
        types: Sequence[CrateDataType] = (),
    ) -> None:
        self._values: Tuple[Value, ...] = ()
        if not data:
            return
        try:
            cells = json_codec.loads(data)
        except json.JSONDecodeError:
            return
        if not isinstance(cells, list):
            return
        values = []
        for i, token in enumerate(cells):
            name = names[i] if i < len(names) else ""
            crate_type = types[i] if i < len(types) else _UNKNOWN_TYPE
            values.append(decode_cell(token, name, crate_type))
        self._values = tuple(values)

    @property
    def values(self) -> Tuple[Value, ...]:
        return self._values

    def size(self) -> int:
        return len(self._values)

    def value(self, key: Union[int, str]) -> Value:
        """Value at a position or with a column name; ``Value()`` when there is none."""
        if isinstance(key, str):
            for v in self._values:
                if v.name == key:
                    return v
            return Value()
        if 0 <= key < len(self._values):
            return self._values[key]
        return Value()

    def as_dict(self) -> dict:
        """Column name to plain Python payload, first occurrence of a name wins."""
        out: dict = {}
        for v in self._values:
            out.setdefault(v.name, v.python_value)
        return out

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def __getitem__(self, key: Union[int, str]) -> Value:
        return self.value(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Record({[v.python_value for v in self._values]!r})"
