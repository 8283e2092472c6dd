import logging
from typing import Dict, Tuple

from bitops import BitSequence
from errors import WidthOverflow

logger = logging.getLogger(__name__)

#: Integer kinds: name -> (width in bits, signed).
INT_KINDS: Dict[str, Tuple[int, bool]] = {
    "int8": (8, True),
    "uint8": (8, False),
    "int16": (16, True),
    "uint16": (16, False),
    "int32": (32, True),
    "uint32": (32, False),
    "int64": (64, True),
    "uint64": (64, False),
}


def int_range(width: int, signed: bool) -> Tuple[int, int]:
    """Return the inclusive ``(min, max)`` of a ``width``-bit integer."""
    if signed:
        return -(1 << (width - 1)), (1 << (width - 1)) - 1
    return 0, (1 << width) - 1


def decode_int(seq: BitSequence, width: int, signed: bool = False) -> int:
    """Reinterpret the captured bits as a ``width``-bit integer.

    Bytes are accumulated from the most significant stored byte down to
    byte 0. A pattern narrower than ``width`` is zero-extended; for signed
    targets the result is read as two's complement in ``width`` bits.

    :param seq: Captured bits.
    :type seq: BitSequence
    :param width: Width of the target integer in bits.
    :type width: int
    :param signed: Whether the target is two's complement signed.
    :type signed: bool
    :returns: The reconstructed integer.
    :rtype: int
    :raises ValueError: If ``width`` is not positive.
    :raises WidthOverflow: If ``seq`` holds more than ``width`` bits.
    """
    if width <= 0:
        raise ValueError(f"Integer width must be positive, got {width}")
    if seq.bit_length() > width:
        raise WidthOverflow(seq.bit_length(), width)

    data = seq.raw()
    result = 0
    for i in range(len(data) - 1, -1, -1):
        result = result * 256 + data[i]

    if signed and result >= (1 << (width - 1)):
        result -= 1 << width
    logger.debug(
        "decoded %d bits as %s%d: %d",
        seq.bit_length(), "int" if signed else "uint", width, result,
    )
    return result


def decode_int_kind(seq: BitSequence, kind: str) -> int:
    """Decode using a named integer kind such as ``"int16"``.

    :raises ValueError: If ``kind`` is not in :data:`INT_KINDS`.
    """
    try:
        width, signed = INT_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown integer kind: {kind}") from None
    return decode_int(seq, width, signed)
