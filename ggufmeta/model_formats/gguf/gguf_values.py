# ggufmeta/model_formats/gguf/gguf_values.py
"""
Tag-dispatched decoding of GGUF metadata values.

Every value type has one decode function; ``decode_value`` looks it up in
``_DECODERS``. Arrays recurse through the same table for their elements.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

from ggufmeta.io.cursor import Cursor

from .gguf import (
    GGUFArray,
    InvalidBoolError,
    InvalidUtf8Error,
    NestingTooDeepError,
)
from .gguf_types import STRUCT_FORMATS, GGUFValueType, value_type_from_code


# Each nesting level costs one interpreter frame; stays well under the default
# recursion limit even when decoding starts from a deep call stack.
MAX_DEPTH_LIMIT = 256


@dataclass(frozen=True)
class ReaderOptions:
    """Decoder strictness settings.

    Attributes:
        strict_bool: Reject bool bytes other than 0 and 1.
        max_depth: Maximum array nesting depth (top-level array is depth 1),
            at most MAX_DEPTH_LIMIT.
    """

    strict_bool: bool = False
    max_depth: int = 64

    def __post_init__(self) -> None:
        if not isinstance(self.max_depth, int) or not 1 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(
                f"max_depth must be an int in 1..{MAX_DEPTH_LIMIT}, got {self.max_depth!r}"
            )


DEFAULT_OPTIONS = ReaderOptions()

_Decoder = Callable[[Cursor, ReaderOptions, int], Any]


def read_string(cur: Cursor) -> str:
    """u64 length followed by that many UTF-8 bytes."""
    (n,) = cur.unpack("<Q")
    start = cur.offset
    raw = cur.read_exact(n)
    try:
        return raw.decode("utf-8", "strict")
    except UnicodeDecodeError as e:
        raise InvalidUtf8Error(f"Invalid UTF-8: {e.reason}", offset=start + e.start) from None


def read_value_type(cur: Cursor) -> GGUFValueType:
    """u32 type tag resolved through the registry."""
    at = cur.offset
    (code,) = cur.unpack("<I")
    return value_type_from_code(code, offset=at)


def _fixed(value_type: GGUFValueType) -> _Decoder:
    fmt = STRUCT_FORMATS[value_type]

    def decode(cur: Cursor, options: ReaderOptions, depth: int) -> Any:
        (v,) = cur.unpack(fmt)
        return v

    return decode


def _decode_bool(cur: Cursor, options: ReaderOptions, depth: int) -> bool:
    at = cur.offset
    (b,) = cur.unpack("<B")
    if options.strict_bool and b not in (0, 1):
        raise InvalidBoolError(f"Invalid bool byte 0x{b:02x}", offset=at)
    return b != 0


def _decode_string(cur: Cursor, options: ReaderOptions, depth: int) -> str:
    return read_string(cur)


def _decode_array(cur: Cursor, options: ReaderOptions, depth: int) -> GGUFArray:
    if depth >= options.max_depth:
        raise NestingTooDeepError(
            f"Array nesting deeper than {options.max_depth}", offset=cur.offset
        )
    element_type = read_value_type(cur)
    (count,) = cur.unpack("<Q")
    decode = _DECODERS[element_type]
    # Elements are decoded one at a time; an oversized count runs out of bytes.
    items = []
    for _ in range(count):
        items.append(decode(cur, options, depth + 1))
    return GGUFArray(element_type=element_type, count=count, items=tuple(items))


_DECODERS: Dict[GGUFValueType, _Decoder] = {t: _fixed(t) for t in STRUCT_FORMATS}
_DECODERS[GGUFValueType.BOOL] = _decode_bool
_DECODERS[GGUFValueType.STRING] = _decode_string
_DECODERS[GGUFValueType.ARRAY] = _decode_array


def decode_value(
    value_type: GGUFValueType, cur: Cursor, *, options: ReaderOptions = DEFAULT_OPTIONS
) -> Tuple[Any, int]:
    """Decode one value of ``value_type`` at the cursor.

    Returns:
        The decoded value and the number of bytes consumed.

    Raises:
        TruncatedError, UnknownValueTypeError, InvalidUtf8Error,
        InvalidBoolError, NestingTooDeepError, GGUFIOError.
    """
    start = cur.offset
    value = _DECODERS[value_type](cur, options, 0)
    return value, cur.offset - start
