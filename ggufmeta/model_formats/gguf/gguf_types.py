# ggufmeta/model_formats/gguf/gguf_types.py
"""
GGUF metadata value types (wire-level type tags).
"""
from __future__ import annotations

from enum import IntEnum
from typing import Dict, Optional


class GGUFValueType(IntEnum):
    """Metadata value type tags as stored on the wire (u32 LE)."""

    UINT8 = 0
    INT8 = 1
    UINT16 = 2
    INT16 = 3
    UINT32 = 4
    INT32 = 5
    FLOAT32 = 6
    BOOL = 7
    STRING = 8
    ARRAY = 9
    UINT64 = 10
    INT64 = 11
    FLOAT64 = 12


# Little-endian struct formats for the fixed-width tags
STRUCT_FORMATS: Dict[GGUFValueType, str] = {
    GGUFValueType.UINT8: "<B",
    GGUFValueType.INT8: "<b",
    GGUFValueType.UINT16: "<H",
    GGUFValueType.INT16: "<h",
    GGUFValueType.UINT32: "<I",
    GGUFValueType.INT32: "<i",
    GGUFValueType.FLOAT32: "<f",
    GGUFValueType.BOOL: "<B",
    GGUFValueType.UINT64: "<Q",
    GGUFValueType.INT64: "<q",
    GGUFValueType.FLOAT64: "<d",
}

FIXED_WIDTHS: Dict[GGUFValueType, int] = {
    GGUFValueType.UINT8: 1,
    GGUFValueType.INT8: 1,
    GGUFValueType.UINT16: 2,
    GGUFValueType.INT16: 2,
    GGUFValueType.UINT32: 4,
    GGUFValueType.INT32: 4,
    GGUFValueType.FLOAT32: 4,
    GGUFValueType.BOOL: 1,
    GGUFValueType.UINT64: 8,
    GGUFValueType.INT64: 8,
    GGUFValueType.FLOAT64: 8,
}

_BY_CODE: Dict[int, GGUFValueType] = {t.value: t for t in GGUFValueType}


def value_type_from_code(code: int, *, offset: Optional[int] = None) -> GGUFValueType:
    """Resolve a wire code to its GGUFValueType.

    Raises:
        UnknownValueTypeError: if ``code`` is not one of 0..12.
    """
    try:
        return _BY_CODE[code]
    except KeyError:
        from .gguf import UnknownValueTypeError

        raise UnknownValueTypeError(code, offset=offset) from None
