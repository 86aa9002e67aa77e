"""
=============================================================================
SCAN ERRORS
=============================================================================

Every condition the scanners can report is an exception. Some of them are
real failures, others are ordinary "nothing more to read" signals:

    ┌──────────────────────┬──────────────┬──────────────────────────────────┐
    │  Exception           │  Kind        │ Raised when                      │
    ├──────────────────────┼──────────────┼──────────────────────────────────┤
    │  EndOfStream         │  signal      │ source exhausted, buffer empty   │
    │  BufferLimitExceeded │  failure     │ data past a full carry buffer    │
    │  InsufficientData    │  signal      │ peek() past the buffered bytes   │
    │  EndOfHeaderSequence │  signal      │ blank line ends the header block │
    │  InvalidHeader       │  failure     │ line has no colon                │
    │  UnreadFWSLine       │  failure     │ continuation line with no field  │
    │  NotAStructuredField │  failure     │ value has no "=" parameter       │
    │  TooManyPositional-  │  failure     │ over 256 keyless parameters      │
    │    Parameters        │              │                                  │
    └──────────────────────┴──────────────┴──────────────────────────────────┘

The hierarchy lets callers catch at the level they care about:

    HeaderScanError
    ├── ScanError
    │   ├── EndOfStream            (also EndOfInput)
    │   ├── BufferLimitExceeded
    │   └── InsufficientData
    └── HeaderParseError
        ├── EndOfHeaderSequence    (also EndOfInput)
        ├── InvalidHeader
        ├── UnreadFWSLine
        ├── NotAStructuredField
        └── TooManyPositionalParameters

=============================================================================
"""

from typing import Optional


class HeaderScanError(Exception):
    """Base class for every error raised by headerscan."""


class EndOfInput(HeaderScanError):
    """
    Marker base for the "normal end" signals.

    ``except EndOfInput`` catches both the end of the byte stream and the
    blank line that terminates a header block.
    """


# =============================================================================
# DELIMITER SCANNER
# =============================================================================

class ScanError(HeaderScanError):
    """Raised by the delimiter scanner."""


class EndOfStream(ScanError, EndOfInput):
    """The source is exhausted and no buffered bytes remain."""

    def __init__(self, message: str = "end of stream"):
        super().__init__(message)


class BufferLimitExceeded(ScanError):
    """
    More data arrived for a full carry buffer that holds no delimiter.

    Carries the cap and the number of bytes currently buffered so the
    caller can log them or decide to drain and resynchronize.
    """

    def __init__(self, limit: int, buffered: int, delimiter: bytes = b""):
        super().__init__(
            f"No delimiter {delimiter!r} within {buffered} buffered bytes "
            f"(limit {limit})"
        )
        self.limit = limit
        self.buffered = buffered
        self.delimiter = delimiter


class InsufficientData(ScanError):
    """peek() asked for more bytes than are currently buffered."""

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Requested {requested} bytes of lookahead, {available} buffered"
        )
        self.requested = requested
        self.available = available


# =============================================================================
# HEADER PARSING
# =============================================================================

class HeaderParseError(HeaderScanError):
    """
    Raised by the header layer.

    ``line`` holds the offending raw line when there is one.
    """

    def __init__(self, message: str, line: Optional[bytes] = None):
        super().__init__(message)
        self.line = line


class EndOfHeaderSequence(HeaderParseError, EndOfInput):
    """The blank line that terminates a header block was reached."""

    def __init__(self, message: str = "end of header block"):
        super().__init__(message, b"")


class InvalidHeader(HeaderParseError):
    """A header line has no colon and is not a continuation line."""


class UnreadFWSLine(HeaderParseError):
    """A continuation (folding white space) line has no owning field."""


class NotAStructuredField(HeaderParseError):
    """The value carries no ``key=value`` parameters."""


class TooManyPositionalParameters(HeaderParseError):
    """
    A structured value has more keyless segments than positional keys.

    Positional keys are single bytes, so at most ``limit`` keyless
    segments can be numbered.
    """

    def __init__(self, message: str, line: Optional[bytes] = None, limit: int = 256):
        super().__init__(message, line)
        self.limit = limit
