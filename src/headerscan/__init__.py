"""
=============================================================================
HEADERSCAN - STREAMING DELIMITER SCANNER AND HEADER PARSER
=============================================================================

Reads records out of a byte stream one at a time, and on top of that reads
folded email/MIME-style header blocks.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Byte source (file, socket, BytesIO, generator of chunks)          │
    │        │                                                             │
    │        │  readinto()                                                 │
    │        ▼                                                             │
    │   ┌──────────────────────┐                                          │
    │   │  DelimiterScanner    │  carry buffer, straddling delimiters,    │
    │   │  core/scanner.py     │  memory cap, peek()                      │
    │   └──────────┬───────────┘                                          │
    │              │  one CRLF line per scan()                             │
    │              ▼                                                       │
    │   ┌──────────────────────┐                                          │
    │   │  HeaderFieldScanner  │  unfolding, name/value split             │
    │   │  header/scanner.py   │                                          │
    │   └──────────┬───────────┘                                          │
    │              │  HeaderField(name, value)                             │
    │              ▼                                                       │
    │   ┌──────────────────────┐      ┌───────────────────────────────┐   │
    │   │  Headers             │ ───► │  HeaderFieldValue             │   │
    │   │  header/collection.py│      │  .as_structured() (lazy)      │   │
    │   └──────────────────────┘      └───────────────────────────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    import io
    from headerscan import DelimiterScanner, scan_all_from_stream

    # Tokens
    scanner = DelimiterScanner(io.BytesIO(b"a;;b;;c"), delimiter=b";;")
    list(scanner)   # [b"a", b"b", b"c"]

    # Header block
    raw = b"Content-Type: text/plain; name=a.txt\\r\\n\\r\\n"
    result = scan_all_from_stream(io.BytesIO(raw))
    result.status                                      # ScanStatus.COMPLETE
    result.headers.first(b"Content-Type").as_structured()
    # {b"\\x00": b"text/plain", b"name": b"a.txt"}

=============================================================================
"""

__version__ = "1.0.0"

from .config import ScannerConfig
from .core import DelimiterScanner, IterableSource, SocketSource, as_source
from .errors import (
    BufferLimitExceeded,
    EndOfHeaderSequence,
    EndOfInput,
    EndOfStream,
    HeaderParseError,
    HeaderScanError,
    InsufficientData,
    InvalidHeader,
    NotAStructuredField,
    ScanError,
    TooManyPositionalParameters,
    UnreadFWSLine,
)
from .header import (
    HeaderField,
    HeaderFieldScanner,
    HeaderFieldValue,
    Headers,
    HeaderScanResult,
    ScanStatus,
    scan_all_from_stream,
)

__all__ = [
    "__version__",
    # config
    "ScannerConfig",
    # core
    "DelimiterScanner",
    "IterableSource",
    "SocketSource",
    "as_source",
    # header
    "HeaderField",
    "HeaderFieldScanner",
    "HeaderFieldValue",
    "Headers",
    "HeaderScanResult",
    "ScanStatus",
    "scan_all_from_stream",
    # errors
    "HeaderScanError",
    "EndOfInput",
    "ScanError",
    "EndOfStream",
    "BufferLimitExceeded",
    "InsufficientData",
    "HeaderParseError",
    "EndOfHeaderSequence",
    "InvalidHeader",
    "UnreadFWSLine",
    "NotAStructuredField",
    "TooManyPositionalParameters",
]
