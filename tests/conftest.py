import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


def from_pattern(pattern: int, bits: int):
    """Build a BitSequence holding ``pattern`` laid out little-endian."""
    from bitops import capture

    return capture(pattern.to_bytes(bits // 8, "little"), bits)


@pytest.fixture()
def pattern():
    """
    Fixture that provides the from_pattern helper without importing conftest.
    """
    return from_pattern


@pytest.fixture()
def report_recorder():
    """Provide a reusable report callback and its call log."""
    lines = []

    def cb(line: str):
        lines.append(line)

    return cb, lines
