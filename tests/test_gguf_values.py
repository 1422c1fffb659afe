"""
Tests for tag-dispatched value decoding.
"""

import dataclasses
import math
import struct

import pytest

from gguf_builder import encode_value
from ggufmeta.io.cursor import ByteCursor
from ggufmeta.model_formats.gguf.gguf import (
    GGUFArray,
    InvalidBoolError,
    InvalidUtf8Error,
    NestingTooDeepError,
    TruncatedError,
    UnknownValueTypeError,
)
from ggufmeta.model_formats.gguf.gguf_types import GGUFValueType as VT
from ggufmeta.model_formats.gguf.gguf_values import MAX_DEPTH_LIMIT, ReaderOptions, decode_value


def _decode(vt, raw, **opts):
    return decode_value(vt, ByteCursor(raw), options=ReaderOptions(**opts))


@pytest.mark.parametrize(
    "vt, raw, expected",
    [
        (VT.UINT8, b"\xff", 255),
        (VT.INT8, b"\xff", -1),
        (VT.UINT16, b"\x34\x12", 0x1234),
        (VT.INT16, b"\xfe\xff", -2),
        (VT.UINT32, b"\x2a\x00\x00\x00", 42),
        (VT.INT32, b"\xd6\xff\xff\xff", -42),
        (VT.FLOAT32, struct.pack("<f", 1.5), 1.5),
        (VT.UINT64, b"\xff" * 8, 2**64 - 1),
        (VT.INT64, b"\xff" * 8, -1),
        (VT.FLOAT64, struct.pack("<d", -0.25), -0.25),
        (VT.BOOL, b"\x00", False),
        (VT.BOOL, b"\x01", True),
    ],
)
def test_fixed_width_scalars(vt, raw, expected):
    value, consumed = _decode(vt, raw + b"trailing")
    assert value == expected
    assert consumed == len(raw)


def test_float32_nan_and_inf():
    value, _ = _decode(VT.FLOAT32, struct.pack("<f", float("inf")))
    assert value == float("inf")
    value, _ = _decode(VT.FLOAT32, struct.pack("<I", 0x7FC00000))
    assert math.isnan(value)


def test_bool_nonzero_is_true_by_default():
    value, _ = _decode(VT.BOOL, b"\x02")
    assert value is True


def test_bool_strict_mode_rejects_other_bytes():
    assert _decode(VT.BOOL, b"\x01", strict_bool=True)[0] is True
    with pytest.raises(InvalidBoolError) as exc:
        _decode(VT.BOOL, b"\x02", strict_bool=True)
    assert exc.value.offset == 0


@pytest.mark.parametrize("vt", [VT.UINT16, VT.UINT32, VT.FLOAT32, VT.UINT64, VT.FLOAT64])
def test_short_scalar_is_truncated(vt):
    with pytest.raises(TruncatedError):
        _decode(vt, b"\x00")


def test_string():
    value, consumed = _decode(VT.STRING, encode_value(VT.STRING, "héllo"))
    assert value == "héllo"
    assert consumed == 8 + len("héllo".encode("utf-8"))


def test_empty_string():
    assert _decode(VT.STRING, struct.pack("<Q", 0)) == ("", 8)


def test_string_invalid_utf8():
    with pytest.raises(InvalidUtf8Error) as exc:
        _decode(VT.STRING, struct.pack("<Q", 3) + b"a\xffb")
    assert exc.value.offset == 9


def test_string_length_beyond_data():
    with pytest.raises(TruncatedError):
        _decode(VT.STRING, struct.pack("<Q", 2**63) + b"abc")


def test_array_of_uint8():
    raw = struct.pack("<IQ", VT.UINT8, 3) + b"\x01\x02\x03"
    value, consumed = _decode(VT.ARRAY, raw)
    assert value == GGUFArray(element_type=VT.UINT8, count=3, items=[1, 2, 3])
    assert consumed == 15
    assert list(value) == [1, 2, 3]
    assert len(value) == 3


def test_array_of_strings():
    raw = encode_value(VT.ARRAY, (VT.STRING, ["a", "", "ccc"]))
    value, _ = _decode(VT.ARRAY, raw)
    assert value.items == ("a", "", "ccc")


@pytest.mark.parametrize("element_type", list(VT))
def test_empty_array_consumes_twelve_bytes(element_type):
    raw = struct.pack("<IQ", element_type, 0)
    value, consumed = _decode(VT.ARRAY, raw + b"\xaa" * 4)
    assert consumed == 12
    assert value.count == 0
    assert value.items == ()
    assert value.element_type is element_type


def test_nested_arrays_three_levels():
    inner_a = GGUFArray(VT.INT16, 2, [-1, 2])
    inner_b = GGUFArray(VT.INT16, 0, [])
    middle = GGUFArray(VT.ARRAY, 2, [inner_a, inner_b])
    outer = GGUFArray(VT.ARRAY, 1, [middle])
    value, consumed = _decode(VT.ARRAY, encode_value(VT.ARRAY, outer))
    assert value == outer
    assert consumed == 12 + 12 + (12 + 4) + 12
    assert value.to_python() == [[[-1, 2], []]]


def test_nested_array_inner_count_validated_independently():
    # outer declares 2 inner arrays but the second inner array is cut short
    raw = (
        struct.pack("<IQ", VT.ARRAY, 2)
        + struct.pack("<IQ", VT.UINT8, 1) + b"\x07"
        + struct.pack("<IQ", VT.UINT8, 5) + b"\x01\x02"
    )
    with pytest.raises(TruncatedError):
        _decode(VT.ARRAY, raw)


def test_array_unknown_element_type():
    with pytest.raises(UnknownValueTypeError) as exc:
        _decode(VT.ARRAY, struct.pack("<IQ", 13, 1) + b"\x00")
    assert exc.value.code == 13
    assert exc.value.offset == 0


def test_array_count_not_prevalidated():
    # huge count fails once the bytes run out, after decoding what is there
    raw = struct.pack("<IQ", VT.UINT32, 2**64 - 1) + struct.pack("<II", 1, 2)
    with pytest.raises(TruncatedError) as exc:
        _decode(VT.ARRAY, raw)
    assert exc.value.offset == 20


def test_nesting_depth_limit():
    def nest(levels):
        value = GGUFArray(VT.UINT8, 1, [9])
        for _ in range(levels - 1):
            value = GGUFArray(VT.ARRAY, 1, [value])
        return encode_value(VT.ARRAY, value)

    assert _decode(VT.ARRAY, nest(3), max_depth=3)[0].to_python() == [[[9]]]
    with pytest.raises(NestingTooDeepError):
        _decode(VT.ARRAY, nest(3), max_depth=2)


def test_deep_nesting_does_not_hit_recursion_limit():
    raw = b"".join(struct.pack("<IQ", VT.ARRAY, 1) for _ in range(5000))
    with pytest.raises(NestingTooDeepError):
        _decode(VT.ARRAY, raw)


def test_deepest_allowed_nesting_does_not_hit_recursion_limit():
    raw = b"".join(struct.pack("<IQ", VT.ARRAY, 1) for _ in range(5000))
    with pytest.raises(NestingTooDeepError):
        _decode(VT.ARRAY, raw, max_depth=MAX_DEPTH_LIMIT)


def test_decoded_array_is_immutable():
    value, _ = _decode(VT.ARRAY, struct.pack("<IQ", VT.UINT8, 3) + b"\x01\x02\x03")
    assert isinstance(value.items, tuple)
    with pytest.raises(AttributeError):
        value.items.append(4)
    with pytest.raises(dataclasses.FrozenInstanceError):
        value.count = 99
    assert value.count == len(value.items) == 3


def test_array_count_must_match_items():
    assert GGUFArray(VT.UINT8, 2, [1, 2]).items == (1, 2)
    with pytest.raises(ValueError):
        GGUFArray(VT.UINT8, 3, [1, 2])


@pytest.mark.parametrize("bad", [0, -1, "3", MAX_DEPTH_LIMIT + 1, 100000])
def test_invalid_max_depth(bad):
    with pytest.raises(ValueError):
        ReaderOptions(max_depth=bad)
