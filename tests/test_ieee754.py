import logging
import math
import struct

import pytest

from bitops import BitSequence, capture_value
from errors import WrongWidth
from ieee754 import (
    FLOAT32,
    FLOAT64,
    FloatClass,
    FloatFields,
    classify,
    decode_float32,
    decode_float64,
    decompose,
)


def test_positive_zero(pattern):
    seq = pattern(0x00000000, 32)
    v = decode_float32(seq)
    assert v == 0.0
    assert math.copysign(1.0, v) == 1.0
    assert seq.get_bit(31) is False


def test_negative_zero(pattern):
    seq = pattern(0x80000000, 32)
    v = decode_float32(seq)
    assert v == 0.0
    assert math.copysign(1.0, v) == -1.0
    assert seq.get_bit(31) is True


def test_positive_infinity(pattern):
    assert decode_float32(pattern(0x7F800000, 32)) == math.inf
    assert decode_float32(pattern(0xFF800000, 32)) == -math.inf
    assert decode_float64(pattern(0x7FF0000000000000, 64)) == math.inf
    assert decode_float64(pattern(0xFFF0000000000000, 64)) == -math.inf


def test_double_one_and_a_half(pattern):
    assert decode_float64(pattern(0x3FF8000000000000, 64)) == 1.5


@pytest.mark.parametrize("bits", [0x7FC00000, 0x7F800001, 0xFFFFFFFF,
                                  0x7FA00000])
def test_float_nan_patterns_are_canonical(pattern, bits):
    v = decode_float32(pattern(bits, 32))
    assert math.isnan(v)
    assert math.copysign(1.0, v) == 1.0


def test_double_nan_patterns(pattern):
    assert math.isnan(decode_float64(pattern(0x7FF8000000000000, 64)))
    assert math.isnan(decode_float64(pattern(0xFFF0000000000001, 64)))


def test_float_subnormals(pattern):
    assert decode_float32(pattern(0x00000001, 32)) == 2.0 ** -149
    assert decode_float32(pattern(0x007FFFFF, 32)) == (2 ** 23 - 1) * 2.0 ** -149
    assert decode_float32(pattern(0x80000001, 32)) == -(2.0 ** -149)


def test_double_subnormals(pattern):
    assert decode_float64(pattern(0x0000000000000001, 64)) == 5e-324
    assert decode_float64(pattern(0x000FFFFFFFFFFFFF, 64)) == (
        struct.unpack("<d", (0x000FFFFFFFFFFFFF).to_bytes(8, "little"))[0]
    )


def test_format_extremes(pattern):
    assert decode_float32(pattern(0x7F7FFFFF, 32)) == 3.4028234663852886e38
    assert decode_float32(pattern(0x00800000, 32)) == 2.0 ** -126
    assert decode_float64(pattern(0x7FEFFFFFFFFFFFFF, 64)) == 1.7976931348623157e308
    assert decode_float64(pattern(0x0010000000000000, 64)) == 2.0 ** -1022


@pytest.mark.parametrize("value", [1.0, -2.5, 0.1, 1e-40, 123456.789,
                                   -3.4e38, 1.17549435e-38])
def test_float32_values_round_trip(value):
    f32 = struct.unpack("<f", struct.pack("<f", value))[0]
    assert decode_float32(capture_value(f32, "float32")) == f32


@pytest.mark.parametrize("value", [1.0, -2.5, 0.1, math.pi, 1e-310,
                                   -1e308, 2.0 ** 1023])
def test_float64_values_round_trip(value):
    assert decode_float64(capture_value(value)) == value


def test_wrong_width():
    with pytest.raises(WrongWidth) as exc:
        _ = decode_float32(BitSequence(b"\x00" * 8))
    assert exc.value.bit_length == 64
    assert exc.value.expected == 32
    with pytest.raises(WrongWidth):
        _ = decode_float64(BitSequence(b"\x00" * 4))
    with pytest.raises(WrongWidth):
        _ = decode_float64(BitSequence())


def test_format_constants():
    assert (FLOAT32.bias, FLOAT32.subnormal_exponent,
            FLOAT32.exponent_sentinel) == (127, -126, 255)
    assert (FLOAT64.bias, FLOAT64.subnormal_exponent,
            FLOAT64.exponent_sentinel) == (1023, -1022, 2047)


def test_classify_table():
    assert classify(0, 0, FLOAT32) is FloatClass.ZERO
    assert classify(0, 1, FLOAT32) is FloatClass.SUBNORMAL
    assert classify(1, 0, FLOAT32) is FloatClass.NORMAL
    assert classify(254, 5, FLOAT32) is FloatClass.NORMAL
    assert classify(255, 0, FLOAT32) is FloatClass.INFINITY
    assert classify(255, 1, FLOAT32) is FloatClass.NAN
    assert classify(255, 0, FLOAT64) is FloatClass.NORMAL
    assert classify(2047, 0, FLOAT64) is FloatClass.INFINITY


def test_decompose_fields_span_byte_boundary(pattern):
    fields = decompose(pattern(0xC0490FDB, 32), FLOAT32)
    assert fields.sign == 1
    assert fields.exponent == 0x80
    assert fields.mantissa == 0x490FDB
    assert fields.cls is FloatClass.NORMAL

    fields = decompose(pattern(0x3FF8000000000000, 64), FLOAT64)
    assert (fields.sign, fields.exponent, fields.mantissa) == (0, 1023, 1 << 51)


def test_max_finite():
    assert FLOAT32.max_finite == 3.4028234663852886e38
    assert FLOAT64.max_finite == 1.7976931348623157e308


def test_decode_debug_logging(pattern, caplog):
    with caplog.at_level(logging.DEBUG, logger="ieee754"):
        _ = decode_float64(pattern(0x3FF8000000000000, 64))
    assert "3ff8000000000000 classified as normal" in caplog.text


def test_public_types_documented():
    assert FloatClass.__doc__ and "NORMAL" in FloatClass.__doc__
    assert ":ivar cls:" in FloatFields.__doc__
    assert ":ivar expected:" in WrongWidth.__doc__
