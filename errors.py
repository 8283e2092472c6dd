class BitopError(ValueError):
    """Base class for every capture and decoding failure.

    All subclasses are input-validation errors: they are deterministic and
    retrying the same call can never succeed.
    """


class InvalidLength(BitopError):
    """Requested bit length is not a whole number of bytes.

    :ivar bit_length: The rejected bit length.
    :type bit_length: int
    """

    def __init__(self, bit_length: int):
        self.bit_length = bit_length
        super().__init__(
            f"bit length must be a non-negative multiple of 8, got {bit_length}"
        )


class OutOfRange(BitopError, IndexError):
    """Bit position outside ``[0, bit_length)``.

    :ivar pos: The rejected bit position.
    :type pos: int
    :ivar bit_length: Bit length of the sequence that was addressed.
    :type bit_length: int
    """

    def __init__(self, pos: int, bit_length: int):
        self.pos = pos
        self.bit_length = bit_length
        super().__init__(
            f"bit position {pos} out of range for {bit_length} bits"
        )


class WidthOverflow(BitopError, OverflowError):
    """Captured pattern is wider than the target integer.

    :ivar bit_length: Bit length of the captured sequence.
    :type bit_length: int
    :ivar width: Width of the requested integer type.
    :type width: int
    """

    def __init__(self, bit_length: int, width: int):
        self.bit_length = bit_length
        self.width = width
        super().__init__(
            f"{bit_length} captured bits do not fit a {width}-bit integer"
        )


class WrongWidth(BitopError):
    """Float decoder called on a sequence of the wrong size.

    :ivar bit_length: Bit length of the sequence that was passed.
    :type bit_length: int
    :ivar expected: Width the decoder requires (32 or 64).
    :type expected: int
    """

    def __init__(self, bit_length: int, expected: int):
        self.bit_length = bit_length
        self.expected = expected
        super().__init__(
            f"expected exactly {expected} bits, got {bit_length}"
        )


class SourceTooShort(BitopError):
    """Source buffer holds fewer bytes than requested.

    :ivar needed: Number of bytes the capture asked for.
    :type needed: int
    :ivar available: Number of bytes the source actually holds.
    :type available: int
    """

    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        super().__init__(
            f"need {needed} bytes from source, only {available} available"
        )
