"""
=============================================================================
HEADER FIELD SCANNER
=============================================================================

Reads one logical header field at a time from a CRLF-delimited stream.

=============================================================================
HEADER BLOCK ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    MIME-Version: 1.0\\r\\n                  ← one physical line        │
    │    Content-Type: text/plain; size="10";\\r\\n  ← field starts          │
    │     name="wololo.txt"\\r\\n                 ← continuation (folded)   │
    │    \\r\\n                                   ← blank line: block ends  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A line starting with a space or tab continues the field above it.
UNFOLDING glues those physical lines back together. Here the glue is
nothing at all: the CRLF is dropped and the continuation line, leading
whitespace included, is appended as-is:

    b'text/plain; size="10";' + b' name="wololo.txt"'
        → b'text/plain; size="10"; name="wololo.txt"'

=============================================================================
ONE-BYTE LOOKAHEAD
=============================================================================

Whether a field continues is only known by looking at the first byte of
the NEXT line. That line must not be consumed if it starts a new field,
so the scanner peeks instead of scanning:

    peek(1) == b" " or b"\\t"   → scan it and append
    peek(1) == anything else    → stop, leave it for the next call
    peek(1) fails               → stop (nothing buffered to look at)

peek() only sees bytes that are already buffered. When a read happened to
end exactly at a line boundary, a continuation line that is still in the
source is NOT unfolded; it shows up on the next call as UnreadFWSLine.

=============================================================================
"""

import logging
from typing import Any, Iterator, NamedTuple, Optional

from ..config import ScannerConfig
from ..core.scanner import DelimiterScanner
from ..errors import (
    EndOfHeaderSequence,
    EndOfInput,
    InsufficientData,
    InvalidHeader,
    UnreadFWSLine,
)


logger = logging.getLogger(__name__)


FIELD_SEPARATOR = b":"

# Linear white space: the bytes that mark a continuation line
WHITESPACE = b" \t"


def is_whitespace(byte: int) -> bool:
    """True for SP and HTAB."""
    return byte in WHITESPACE


def lstrip_whitespace(data: bytes) -> bytes:
    """Drop leading SP/HTAB (and nothing else)."""
    return data.lstrip(WHITESPACE)


class HeaderField(NamedTuple):
    """One unfolded header field: raw name and raw value."""

    name: bytes
    value: bytes


class HeaderFieldScanner:
    """
    Scans header fields from a byte source.

    Wraps a DelimiterScanner that always splits on CRLF and never keeps
    the delimiter. Chunk size and buffer cap come from ``config``.

    Example:
        scanner = HeaderFieldScanner(io.BytesIO(b"Subject: hi\\r\\n\\r\\n"))
        scanner.scan_field()   # HeaderField(name=b"Subject", value=b"hi")
        scanner.scan_field()   # raises EndOfHeaderSequence
    """

    def __init__(self, source: Any, config: Optional[ScannerConfig] = None):
        config = (config or ScannerConfig()).for_headers()
        self.lines = DelimiterScanner(source, config)

    def scan_field(self) -> HeaderField:
        """
        Read the next logical header field.

        =====================================================================
        ALGORITHM
        =====================================================================

        1. Scan one line. Empty line → EndOfHeaderSequence
        2. Find the first colon. None → UnreadFWSLine if the line starts
           with whitespace, InvalidHeader otherwise
        3. Unfold while the buffered next line starts with whitespace
        4. Split at the first colon; trim leading whitespace off the value

        =====================================================================

        Returns:
            The field's name and fully unfolded value.

        Raises:
            EndOfHeaderSequence: The blank line ending the block was read.
            InvalidHeader: The line has no colon.
            UnreadFWSLine: The line is a continuation with no field.
            EndOfStream: The source ran out before a field started.
            BufferLimitExceeded: A line exceeded the buffer cap.
        """
        # ─────────────────────────────────────────────────────────────────
        # STEP 1: Read the first physical line
        # ─────────────────────────────────────────────────────────────────
        line = self.lines.scan()
        if not line:
            raise EndOfHeaderSequence()

        # ─────────────────────────────────────────────────────────────────
        # STEP 2: It must be a "Name: value" line
        # ─────────────────────────────────────────────────────────────────
        separator = line.find(FIELD_SEPARATOR)
        if separator == -1:
            if is_whitespace(line[0]):
                raise UnreadFWSLine(f"Continuation line without a field: {line!r}", line)
            raise InvalidHeader(f"Header line has no colon: {line!r}", line)

        # ─────────────────────────────────────────────────────────────────
        # STEP 3: Unfold continuation lines
        # ─────────────────────────────────────────────────────────────────
        # The colon was found on the first physical line, and appending
        # keeps its offset valid.
        unfolded = bytearray(line)
        while self._continues():
            unfolded += self.lines.scan()
            logger.debug(f"Unfolded continuation of {bytes(unfolded[:separator])!r}")

        # ─────────────────────────────────────────────────────────────────
        # STEP 4: Split name from value
        # ─────────────────────────────────────────────────────────────────
        name = bytes(unfolded[:separator])
        value = lstrip_whitespace(bytes(unfolded[separator + 1:]))

        return HeaderField(name, value)

    def _continues(self) -> bool:
        """True if the buffered next line is a continuation line."""
        try:
            first = self.lines.peek(1)
        except InsufficientData:
            return False
        return is_whitespace(first[0])

    def __iter__(self) -> Iterator[HeaderField]:
        """
        Yield fields until the block ends.

        Stops quietly on the blank line or at the end of the stream;
        malformed lines and buffer overflows propagate.
        """
        while True:
            try:
                yield self.scan_field()
            except EndOfInput:
                return
