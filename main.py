import argparse
import logging
import math
import os
import random
import struct
import sys

from typing import Callable, Dict, List, Optional
from bitdump import render_table
from bitops import BitSequence, capture, capture_value, kind_width
from errors import BitopError
from ieee754 import FLOAT_FORMATS, FloatClass, decode_float, decompose
from intdecode import INT_KINDS, decode_int_kind, int_range

DECODE_KINDS: List[str] = list(INT_KINDS) + list(FLOAT_FORMATS)
DEFAULT_SELFTEST_ROUNDS = 10000  #: Used when BITPUN_SELFTEST_ROUNDS is unset


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Reinterpret raw bit patterns as integers and IEEE-754 "
                    "floating-point values"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    decode = subparsers.add_parser(
        "decode", aliases=["d"], help="Decode a bit pattern as a typed value"
    )
    decode.add_argument(
        "pattern", help="Bit pattern as an integer (0x..., 0b... or decimal)"
    )
    decode.add_argument(
        "-t", "--type", dest="kind", required=True, choices=DECODE_KINDS,
        help="Type to decode the pattern as",
    )

    bits = subparsers.add_parser(
        "bits", aliases=["b"], help="Print the bit layout of a value"
    )
    bits.add_argument("value", help="Value to capture")
    bits.add_argument(
        "-t", "--type", dest="kind", required=True, choices=DECODE_KINDS,
        help="Native type to lay the value out as",
    )

    selftest = subparsers.add_parser(
        "selftest", aliases=["s"], help="Run random capture/decode round trips"
    )
    selftest.add_argument(
        "-n",
        "--rounds",
        type=int,
        default=os.getenv("BITPUN_SELFTEST_ROUNDS",
                          str(DEFAULT_SELFTEST_ROUNDS)),
        help="Round trips per type (default: %(default)s)",
    )
    selftest.add_argument(
        "--seed", type=int, default=None, help="Seed for the random generator"
    )

    return parser


def _parse_pattern(text: str) -> int:
    """Parse a non-negative integer bit pattern.

    :param text: Pattern text, with an optional ``0x``/``0b``/``0o`` prefix.
    :type text: str
    :returns: Pattern value.
    :rtype: int
    :raises ValueError: If ``text`` is not a non-negative integer.
    """
    pattern = int(text, 0)
    if pattern < 0:
        raise ValueError(f"Bit pattern must be non-negative: {text}")
    return pattern


def pattern_to_sequence(pattern: int, width: int) -> BitSequence:
    """Lay out ``pattern`` little-endian in ``width`` bits.

    :raises ValueError: If ``pattern`` needs more than ``width`` bits.
    """
    if pattern.bit_length() > width:
        raise ValueError(f"Pattern {pattern:#x} does not fit in {width} bits")
    return capture(pattern.to_bytes(width // 8, "little"), width)


def decode_as(seq: BitSequence, kind: str):
    """Decode ``seq`` as the named integer or float kind."""
    if kind in FLOAT_FORMATS:
        return decode_float(seq, FLOAT_FORMATS[kind])
    return decode_int_kind(seq, kind)


def _parse_value(text: str, kind: str):
    if kind in FLOAT_FORMATS:
        return float(text)
    return int(text, 0)


def _fmt_fields(seq: BitSequence, kind: str) -> str:
    fmt = FLOAT_FORMATS[kind]
    fields = decompose(seq, fmt)
    return (
        f"sign={fields.sign} "
        f"exponent={fields.exponent:#x} (bias {fmt.bias}) "
        f"mantissa={fields.mantissa:#x} "
        f"class={fields.cls.value}"
    )


def run_decode(pattern_text: str, kind: str) -> None:
    """Decode a pattern given on the command line and print the value.

    :param pattern_text: Bit pattern text.
    :type pattern_text: str
    :param kind: Target type name.
    :type kind: str
    :returns: None
    :rtype: None
    """
    seq = pattern_to_sequence(_parse_pattern(pattern_text), kind_width(kind))
    value = decode_as(seq, kind)
    print(f"{kind}: {value!r}")
    if kind in FLOAT_FORMATS:
        print(_fmt_fields(seq, kind))


def run_bits(value_text: str, kind: str) -> None:
    """Capture a value and print its bit table.

    :param value_text: Value text.
    :type value_text: str
    :param kind: Native type to lay the value out as.
    :type kind: str
    :returns: None
    :rtype: None
    """
    seq = capture_value(_parse_value(value_text, kind), kind)
    print(render_table(seq))
    if kind in FLOAT_FORMATS:
        print(_fmt_fields(seq, kind))


def _same_float(a: float, b: float) -> bool:
    """Bitwise-style float equality: signed zeros differ, NaNs never match."""
    return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)


def _to_float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def run_selftest(
    rounds: int,
    seed: Optional[int] = None,
    report: Callable[[str], None] = print,
) -> Dict[str, int]:
    """Round-trip random values of every kind through capture and decode.

    Integers are drawn uniformly over their range, floats uniformly over
    ``[-max, max]`` of their format, and for floats a second pass checks
    random bit patterns (NaN patterns skipped).

    :param rounds: Number of values per kind.
    :type rounds: int
    :param seed: Optional seed for reproducible runs.
    :type seed: Optional[int]
    :param report: Callback receiving one status line per kind.
    :type report: Callable[[str], None]
    :returns: Mapping from kind label to number of failed round trips.
    :rtype: Dict[str, int]
    """
    rng = random.Random(seed)
    failures: Dict[str, int] = {}

    def check(label: str, trial: Callable[[], bool]) -> None:
        wrong = sum(0 if trial() else 1 for _ in range(rounds))
        failures[label] = wrong
        status = "OK" if wrong == 0 else f"{wrong} FAILED"
        report(f"*** {rounds} conversions of {label} [{status}]")

    for kind, (width, signed) in INT_KINDS.items():
        lo, hi = int_range(width, signed)

        def int_trial(kind=kind, lo=lo, hi=hi) -> bool:
            v = rng.randint(lo, hi)
            return decode_int_kind(capture_value(v, kind), kind) == v

        check(kind, int_trial)

    for name, fmt in FLOAT_FORMATS.items():

        def value_trial(name=name, fmt=fmt) -> bool:
            v = rng.uniform(-1.0, 1.0) * fmt.max_finite
            if name == "float32":
                v = _to_float32(v)
            return _same_float(decode_float(capture_value(v, name), fmt), v)

        def pattern_trial(fmt=fmt) -> bool:
            while True:
                pattern = rng.getrandbits(fmt.bits)
                seq = pattern_to_sequence(pattern, fmt.bits)
                if decompose(seq, fmt).cls is not FloatClass.NAN:
                    break
            code = "<f" if fmt.bits == 32 else "<d"
            expected = struct.unpack(code, seq.raw())[0]
            return _same_float(decode_float(seq, fmt), expected)

        check(name, value_trial)
        check(f"{name} bit patterns", pattern_trial)

    return failures


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI tool.

    :param argv: Arguments to parse instead of ``sys.argv[1:]``.
    :type argv: Optional[List[str]]
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.cmd in ["decode", "d"]:
            run_decode(args.pattern, args.kind)
        elif args.cmd in ["bits", "b"]:
            run_bits(args.value, args.kind)
        elif args.cmd in ["selftest", "s"]:
            failures = run_selftest(args.rounds, args.seed)
            return 1 if any(failures.values()) else 0
    except (BitopError, ValueError, struct.error) as e:
        print(f"[!] {e}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
