import logging
import struct
from typing import Dict, Optional, Tuple

from errors import InvalidLength, OutOfRange, SourceTooShort

logger = logging.getLogger(__name__)

#: Native scalar kinds accepted by ``capture_value``: name -> struct code.
NATIVE_KINDS: Dict[str, str] = {
    "bool": "?",
    "int8": "b",
    "uint8": "B",
    "int16": "h",
    "uint16": "H",
    "int32": "i",
    "uint32": "I",
    "int64": "q",
    "uint64": "Q",
    "float32": "f",
    "float64": "d",
}


class BitSequence:
    """Immutable byte-packed run of bits.

    Byte 0 is the least significant byte. Bit ``pos`` lives in byte
    ``pos // 8`` at offset ``pos % 8``, least significant bit first.

    :ivar _data: Owned copy of the captured bytes.
    :type _data: bytes
    """

    __slots__ = ("_data",)

    def __init__(self, data=b""):
        """Create a sequence holding a private copy of ``data``.

        :param data: Bytes-like object or another :class:`BitSequence`.
        :type data: bytes | bytearray | memoryview | BitSequence
        :returns: None
        :rtype: None
        """
        if isinstance(data, BitSequence):
            data = data._data
        object.__setattr__(self, "_data", memoryview(data).tobytes())

    def __setattr__(self, name, value):
        raise AttributeError("BitSequence is immutable")

    def __delattr__(self, name):
        raise AttributeError("BitSequence is immutable")

    def bit_length(self) -> int:
        """Return the number of stored bits (always a multiple of 8)."""
        return len(self._data) * 8

    def byte_count(self) -> int:
        """Return the number of stored bytes.

        :returns: ``bit_length() // 8``.
        :rtype: int
        """
        return len(self._data)

    def get_bit(self, pos: int) -> bool:
        """Return the value of bit ``pos``.

        :param pos: Global bit index, 0 being the least significant bit.
        :type pos: int
        :returns: ``True`` if the bit is set.
        :rtype: bool
        :raises OutOfRange: If ``pos`` is negative or ``>= bit_length()``.
        """
        if pos < 0 or pos >= self.bit_length():
            raise OutOfRange(pos, self.bit_length())
        return bool((self._data[pos // 8] >> (pos % 8)) & 1)

    def raw(self) -> bytes:
        """Return the underlying bytes, lowest byte first."""
        return self._data

    def __reduce__(self):
        return BitSequence, (self._data,)

    def __copy__(self):
        return BitSequence(self._data)

    def __deepcopy__(self, memo):
        return BitSequence(self._data)

    def __eq__(self, other):
        if not isinstance(other, BitSequence):
            return NotImplemented
        return self._data == other._data

    def __hash__(self):
        return hash(self._data)

    def __len__(self):
        return self.bit_length()

    def __str__(self):
        return "".join(
            "1" if self.get_bit(i) else "0"
            for i in range(self.bit_length() - 1, -1, -1)
        )

    def __repr__(self):
        return f"BitSequence({self._data!r})"


def take_bytes(source, bit_length: int) -> bytes:
    """Copy ``bit_length // 8`` bytes from the start of a buffer.

    :param source: Any object supporting the buffer protocol.
    :param bit_length: Number of bits to take.
    :type bit_length: int
    :returns: The copied bytes.
    :rtype: bytes
    :raises InvalidLength: If ``bit_length`` is negative or not a multiple
        of 8.
    :raises SourceTooShort: If ``source`` holds fewer bytes than requested.
    """
    if bit_length < 0 or bit_length % 8 != 0:
        raise InvalidLength(bit_length)
    nbytes = bit_length // 8
    data = memoryview(source).tobytes()
    if len(data) < nbytes:
        raise SourceTooShort(nbytes, len(data))
    return data[:nbytes]


def capture(source, bit_length: int) -> BitSequence:
    """Capture ``bit_length`` bits from the start of ``source``.

    :param source: Buffer-protocol object (``bytes``, ``bytearray``,
        ``memoryview``, ``array.array``, ``ctypes`` instance, ...) or
        ``None``.
    :param bit_length: Number of bits to copy.
    :type bit_length: int
    :returns: A new sequence; empty when ``source`` is ``None``.
    :rtype: BitSequence
    :raises InvalidLength: If ``bit_length % 8 != 0``.
    :raises SourceTooShort: If ``source`` is smaller than ``bit_length``.
    """
    if bit_length < 0 or bit_length % 8 != 0:
        raise InvalidLength(bit_length)
    if source is None:
        return BitSequence()
    seq = BitSequence(take_bytes(source, bit_length))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("captured %d bits: %s",
                     seq.bit_length(), seq.raw().hex())
    return seq


def _default_kind(value) -> Optional[str]:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int64"
    if isinstance(value, float):
        return "float64"
    return None


def kind_width(kind: str) -> int:
    """Return the width in bits of a native kind.

    :raises ValueError: If ``kind`` is not in :data:`NATIVE_KINDS`.
    """
    try:
        code = NATIVE_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown kind: {kind}") from None
    return struct.calcsize("<" + code) * 8


def pack_value(value, kind: str) -> Tuple[bytes, int]:
    """Pack ``value`` little-endian as ``kind``.

    :returns: Tuple ``(packed_bytes, bit_width)``.
    :rtype: Tuple[bytes, int]
    :raises ValueError: If ``kind`` is unknown.
    :raises struct.error: If ``value`` does not fit ``kind``, including a
        float too large for ``float32``.
    """
    width = kind_width(kind)
    try:
        packed = struct.pack("<" + NATIVE_KINDS[kind], value)
    except OverflowError as e:
        raise struct.error(f"{value!r} does not fit {kind}: {e}") from e
    return packed, width


def capture_value(value, kind: Optional[str] = None) -> BitSequence:
    """Capture the bit pattern of a scalar value.

    Python numbers carry no native width, so ``kind`` names the native type
    to lay the value out as. Without ``kind``, ``bool`` is captured as
    ``bool``, ``int`` as ``int64`` and ``float`` as ``float64``. A
    :class:`BitSequence` is copied and other buffer objects are captured
    whole.

    :param value: Value to capture.
    :param kind: Optional name from :data:`NATIVE_KINDS`.
    :type kind: Optional[str]
    :returns: The captured bits.
    :rtype: BitSequence
    :raises ValueError: If ``kind`` is unknown or cannot be inferred.
    :raises struct.error: If ``value`` is out of range for ``kind``
        (integers out of range as well as floats beyond the ``float32``
        maximum).
    """
    if kind is None:
        if isinstance(value, BitSequence):
            return BitSequence(value)
        kind = _default_kind(value)
        if kind is None:
            try:
                view = memoryview(value)
            except TypeError:
                raise ValueError(
                    f"Cannot infer a kind for {type(value).__name__}"
                ) from None
            return capture(view, view.nbytes * 8)
    packed, width = pack_value(value, kind)
    return capture(packed, width)


def read_unsigned_range(seq: BitSequence, low_bit: int, high_bit: int) -> int:
    """Read bits ``low_bit..high_bit`` (inclusive) as an unsigned integer.

    Bits are accumulated MSB first, so ``high_bit`` ends up as the most
    significant bit of the result.

    :param seq: Sequence to read from.
    :type seq: BitSequence
    :param low_bit: Index of the least significant bit of the field.
    :type low_bit: int
    :param high_bit: Index of the most significant bit of the field.
    :type high_bit: int
    :returns: The field value, ``0 <= result < 2 ** (high_bit - low_bit + 1)``.
    :rtype: int
    :raises OutOfRange: If the range is empty or leaves the sequence.
    """
    if low_bit < 0 or low_bit > high_bit:
        raise OutOfRange(low_bit, seq.bit_length())
    if high_bit >= seq.bit_length():
        raise OutOfRange(high_bit, seq.bit_length())
    result = 0
    for pos in range(high_bit, low_bit - 1, -1):
        result = (result << 1) | seq.get_bit(pos)
    return result
