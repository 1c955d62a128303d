from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class DataType(IntEnum):
    """Column type codes reported by ``/_sql?types``."""

    NULL = 0
    NOT_SUPPORTED = 1
    BYTE = 2
    BOOLEAN = 3
    STRING = 4
    IP = 5
    DOUBLE = 6
    FLOAT = 7
    SHORT = 8
    INTEGER = 9
    LONG = 10
    TIMESTAMP = 11
    OBJECT = 12
    GEO_POINT = 13
    GEO_SHAPE = 14
    ARRAY = 100
    SET = 101

    @classmethod
    def convert(cls, code: int) -> "DataType":
        """Map a wire type code to a DataType; unknown codes become NOT_SUPPORTED."""
        try:
            return cls(code)
        except ValueError:
            return cls.NOT_SUPPORTED


@dataclass(frozen=True)
class CrateDataType:
    """Declared column type plus its original wire definition.

    Fields:
        type: Decoded type code. For composite types (``[100, 9]``) this is the outer code.
        definition: Verbatim JSON fragment of the type entry, e.g. ``"9"`` or ``"[100,9]"``.
    """
    type: DataType = DataType.NOT_SUPPORTED
    definition: str = ""
