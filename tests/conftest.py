"""
pytest configuration and fixtures.
"""

from typing import Callable

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class ChunkedSource:
    """
    readinto() source that hands out at most ``size`` bytes per call.

    Forces delimiters to straddle reads and lets tests control exactly
    what is buffered when peek() runs.
    """

    def __init__(self, data: bytes, size: int):
        self.data = data
        self.size = size
        self.offset = 0
        self.reads = 0

    def readinto(self, buffer) -> int:
        self.reads += 1
        view = memoryview(buffer)
        count = min(self.size, len(view), len(self.data) - self.offset)
        view[:count] = self.data[self.offset:self.offset + count]
        self.offset += count
        return count


@pytest.fixture
def chunked() -> Callable[[bytes, int], ChunkedSource]:
    """Factory for sources that return small reads."""
    return ChunkedSource


@pytest.fixture
def numbered_lines() -> bytes:
    """Newline-separated records with no trailing newline."""
    return b"\n".join([b"1", b"22", b"333", b"4444", b"", b"1", b"333", b"22", b"."])


@pytest.fixture
def mime_header_block() -> bytes:
    """Three single-line fields followed by the blank line."""
    return (
        b"MIME-Version: 1.0\r\n"
        b"Date: Wed, 2 Apr 2025 14:15:19 +0900\r\n"
        b'Content-Type: multipart/alternative; boundary="00000000000062617a0631c4bd41"\r\n'
        b"\r\n"
    )


@pytest.fixture
def folded_header_block() -> bytes:
    """A Content-Type value folded over two physical lines."""
    return (
        b'Content-Type: text/plain; size="1024909";\r\n'
        b' name="wololo.txt"\r\n'
    )
