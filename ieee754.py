"""Manual IEEE-754 binary32/binary64 reconstruction.

Values are rebuilt from their sign, biased exponent and mantissa fields by
summing powers of two, never by reinterpreting the bytes natively. Every
partial sum fits the 53-bit double significand, so the result is exact.

NaN handling is lossy: payload, sign and the quiet/signaling bit are all
dropped and every NaN pattern decodes to ``math.nan``.
"""
import enum
import logging
import math
from dataclasses import dataclass
from typing import NamedTuple

from bitops import BitSequence, read_unsigned_range
from errors import WrongWidth

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FloatFormat:
    """Layout of an IEEE-754 binary interchange format.

    :ivar name: Short name (``"float32"``, ``"float64"``).
    :type name: str
    :ivar bits: Total width.
    :type bits: int
    :ivar exponent_bits: Width of the biased exponent field.
    :type exponent_bits: int
    :ivar mantissa_bits: Width of the stored mantissa field.
    :type mantissa_bits: int
    """

    name: str
    bits: int
    exponent_bits: int
    mantissa_bits: int

    @property
    def bias(self) -> int:
        return (1 << (self.exponent_bits - 1)) - 1

    @property
    def subnormal_exponent(self) -> int:
        return 1 - self.bias

    @property
    def exponent_sentinel(self) -> int:
        """All-ones exponent marking infinity and NaN."""
        return (1 << self.exponent_bits) - 1

    @property
    def sign_bit(self) -> int:
        return self.bits - 1

    @property
    def max_finite(self) -> float:
        """Largest finite value representable in the format."""
        return math.ldexp(2.0 - math.ldexp(1.0, -self.mantissa_bits),
                          self.bias)


FLOAT32 = FloatFormat("float32", 32, 8, 23)
FLOAT64 = FloatFormat("float64", 64, 11, 52)

FLOAT_FORMATS = {fmt.name: fmt for fmt in (FLOAT32, FLOAT64)}


class FloatClass(enum.Enum):
    """Class of an encoded value, a pure function of its ``(E, M)`` fields.

    ``ZERO`` and ``SUBNORMAL`` have ``E == 0``; ``INFINITY`` and ``NAN``
    have the all-ones exponent; everything else is ``NORMAL``.
    """

    ZERO = "zero"
    SUBNORMAL = "subnormal"
    NORMAL = "normal"
    INFINITY = "infinity"
    NAN = "nan"


class FloatFields(NamedTuple):
    """Raw fields of a floating-point pattern.

    :ivar sign: Sign bit, 0 or 1.
    :type sign: int
    :ivar exponent: Biased exponent ``E``.
    :type exponent: int
    :ivar mantissa: Stored mantissa field ``M``.
    :type mantissa: int
    :ivar cls: Classification of ``(E, M)``.
    :type cls: FloatClass
    """

    sign: int
    exponent: int
    mantissa: int
    cls: FloatClass


def classify(exponent: int, mantissa: int, fmt: FloatFormat) -> FloatClass:
    """Classify a pattern from its biased exponent and mantissa fields.

    :param exponent: Biased exponent ``E``.
    :type exponent: int
    :param mantissa: Mantissa field ``M``.
    :type mantissa: int
    :param fmt: Format the fields belong to.
    :type fmt: FloatFormat
    :returns: The class of the encoded value.
    :rtype: FloatClass
    """
    if exponent == 0:
        return FloatClass.ZERO if mantissa == 0 else FloatClass.SUBNORMAL
    if exponent == fmt.exponent_sentinel:
        return FloatClass.INFINITY if mantissa == 0 else FloatClass.NAN
    return FloatClass.NORMAL


def decompose(seq: BitSequence, fmt: FloatFormat) -> FloatFields:
    """Split a pattern into sign, biased exponent and mantissa.

    :raises WrongWidth: If ``seq`` is not exactly ``fmt.bits`` wide.
    """
    if seq.bit_length() != fmt.bits:
        raise WrongWidth(seq.bit_length(), fmt.bits)
    sign = int(seq.get_bit(fmt.sign_bit))
    exponent = read_unsigned_range(
        seq, fmt.mantissa_bits, fmt.sign_bit - 1
    )
    mantissa = read_unsigned_range(seq, 0, fmt.mantissa_bits - 1)
    return FloatFields(sign, exponent, mantissa,
                       classify(exponent, mantissa, fmt))


def _mantissa_sum(mantissa: int, fmt: FloatFormat, exp: int) -> float:
    # bit i of the field weighs 2 ** (i - mantissa_bits + exp)
    total = 0.0
    for i in range(fmt.mantissa_bits):
        if (mantissa >> i) & 1:
            total += math.ldexp(1.0, i - fmt.mantissa_bits + exp)
    return total


def decode_float(seq: BitSequence, fmt: FloatFormat) -> float:
    """Reconstruct the floating-point value encoded by ``seq``.

    :param seq: Captured bits, exactly ``fmt.bits`` wide.
    :type seq: BitSequence
    :param fmt: Format to decode as.
    :type fmt: FloatFormat
    :returns: The value as a Python float. Single-precision values are
        represented exactly.
    :rtype: float
    :raises WrongWidth: If ``seq`` is not exactly ``fmt.bits`` wide.
    """
    fields = decompose(seq, fmt)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s pattern %s classified as %s",
                     fmt.name, seq.raw()[::-1].hex(), fields.cls.value)

    if fields.cls is FloatClass.NAN:
        return math.nan
    if fields.cls is FloatClass.ZERO:
        magnitude = 0.0
    elif fields.cls is FloatClass.INFINITY:
        magnitude = math.inf
    elif fields.cls is FloatClass.SUBNORMAL:
        magnitude = _mantissa_sum(
            fields.mantissa, fmt, fmt.subnormal_exponent
        )
    else:
        exp = fields.exponent - fmt.bias
        magnitude = math.ldexp(1.0, exp) + _mantissa_sum(
            fields.mantissa, fmt, exp
        )

    return -magnitude if fields.sign else magnitude


def decode_float32(seq: BitSequence) -> float:
    """Decode a 32-bit IEEE-754 single-precision pattern."""
    return decode_float(seq, FLOAT32)


def decode_float64(seq: BitSequence) -> float:
    """Decode a 64-bit IEEE-754 double-precision pattern."""
    return decode_float(seq, FLOAT64)
