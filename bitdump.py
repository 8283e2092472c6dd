from typing import List

from bitops import BitSequence, take_bytes


def render_table(seq: BitSequence) -> str:
    """Render a human-readable table of the bits in ``seq``.

    The output opens with ``*** Printing BitSequence:``. For a non-empty
    sequence it lists the bit and byte counts, then a row of bit indices
    and a row of bit values (both from the highest index down to 0), and
    closes with ``*** End of Printing``. An empty sequence gets a single
    ``(no content, ...)`` line after the opening line.

    :param seq: Sequence to render.
    :type seq: BitSequence
    :returns: Multi-line text, without a trailing newline.
    :rtype: str
    """
    lines: List[str] = ["*** Printing BitSequence:"]
    if seq.bit_length() == 0:
        lines.append("    (no content, sequence is empty)")
        return "\n".join(lines)
    positions = range(seq.bit_length() - 1, -1, -1)
    lines += [
        f"bits = {seq.bit_length()}",
        f"size = {seq.byte_count()}",
        "Binary Representation:",
        "".join(f"| {i:2d}" for i in positions) + "|",
        "".join(f"| {int(seq.get_bit(i))} " for i in positions) + "|",
        "*** End of Printing",
    ]
    return "\n".join(lines)


def dump_bits(source, bit_length: int) -> str:
    """Dump the first ``bit_length`` bits of a raw buffer, MSB first.

    The buffer is read as a little-endian value, so the last byte's top bit
    comes first in the string. Works on raw memory without building a
    :class:`BitSequence`.

    :param source: Any buffer-protocol object.
    :param bit_length: Number of bits to dump.
    :type bit_length: int
    :returns: String of ``'0'``/``'1'`` characters of length ``bit_length``.
    :rtype: str
    :raises InvalidLength: If ``bit_length`` is not a multiple of 8.
    :raises SourceTooShort: If ``source`` holds fewer bytes than needed.
    """
    data = take_bytes(source, bit_length)
    return "".join(f"{byte:08b}" for byte in reversed(data))
