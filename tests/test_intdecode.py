import pytest

from bitops import BitSequence, capture_value
from errors import WidthOverflow
from intdecode import INT_KINDS, decode_int, decode_int_kind, int_range


def test_ff_as_signed_byte_is_minus_one(pattern):
    assert decode_int(pattern(0xFF, 8), 8, signed=True) == -1
    assert decode_int(pattern(0xFF, 8), 8) == 255


def test_bytes_accumulate_little_endian():
    seq = BitSequence(b"\x78\x56\x34\x12")
    assert decode_int(seq, 32) == 0x12345678


def test_narrow_pattern_zero_extends():
    assert decode_int(BitSequence(b"\xFF"), 16, signed=True) == 255
    assert decode_int(BitSequence(b"\x80\x00"), 64, signed=True) == 0x80


def test_empty_sequence_decodes_to_zero():
    assert decode_int(BitSequence(), 8) == 0


def test_width_overflow():
    seq = BitSequence(b"\x00\x00\x00")
    with pytest.raises(WidthOverflow) as exc:
        _ = decode_int(seq, 16)
    assert exc.value.bit_length == 24
    assert exc.value.width == 16
    assert isinstance(exc.value, OverflowError)


def test_non_positive_width_rejected():
    with pytest.raises(ValueError):
        _ = decode_int(BitSequence(), 0)


@pytest.mark.parametrize("kind", list(INT_KINDS))
def test_extremes_round_trip(kind):
    width, signed = INT_KINDS[kind]
    lo, hi = int_range(width, signed)
    for v in (lo, hi, 0, 1, lo + 1, hi - 1):
        assert decode_int_kind(capture_value(v, kind), kind) == v


def test_signed_wraparound_of_unsigned_pattern():
    seq = capture_value(0xFFFFFFFE, "uint32")
    assert decode_int(seq, 32, signed=True) == -2


def test_int_range():
    assert int_range(8, True) == (-128, 127)
    assert int_range(8, False) == (0, 255)
    assert int_range(64, True) == (-(2 ** 63), 2 ** 63 - 1)


def test_decode_int_kind_unknown():
    with pytest.raises(ValueError):
        _ = decode_int_kind(BitSequence(b"\x00"), "int7")
