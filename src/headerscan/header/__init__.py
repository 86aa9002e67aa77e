"""
=============================================================================
HEADER BLOCK PARSING
=============================================================================

Builds on the delimiter scanner to read email/MIME-style header blocks:

    from headerscan.header import scan_all_from_stream

    result = scan_all_from_stream(open("message.eml", "rb"))
    if result.ok:
        content_type = result.headers.first(b"Content-Type")
        params = content_type.as_structured()

=============================================================================
"""

from .scanner import HeaderField, HeaderFieldScanner
from .value import HeaderFieldValue
from .collection import (
    Headers,
    HeaderScanResult,
    ScanStatus,
    scan_all_from_stream,
)

__all__ = [
    "HeaderField",
    "HeaderFieldScanner",
    "HeaderFieldValue",
    "Headers",
    "HeaderScanResult",
    "ScanStatus",
    "scan_all_from_stream",
]
