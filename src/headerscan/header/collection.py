"""
=============================================================================
HEADER COLLECTION
=============================================================================

Aggregates every field of one header block into a name-indexed structure.

=============================================================================
MULTIPLE VALUES
=============================================================================

The same field name may appear more than once in a block:

    Received: from a.example by b.example\\r\\n
    Received: from c.example by a.example\\r\\n

Each occurrence is kept, in the order it was read:

    headers.get(b"Received")
        → [HeaderFieldValue(b"from a.example by b.example"),
           HeaderFieldValue(b"from c.example by a.example")]

Names are compared byte-for-byte. b"Content-Type" and b"content-type" are
two different names here; no case folding is applied.

=============================================================================
WHY A RESULT OBJECT?
=============================================================================

Reading a block stops for one of several reasons, and they are not
equally good:

    ┌────────────────────┬────────────────────────────────────────────────┐
    │  ScanStatus        │  Meaning                                       │
    ├────────────────────┼────────────────────────────────────────────────┤
    │  COMPLETE          │  blank line reached, block ended cleanly       │
    │  END_OF_STREAM     │  source ran out before a blank line            │
    │  INVALID_HEADER    │  a line without a colon                        │
    │  UNREAD_FWS_LINE   │  a continuation line with no field             │
    │  BUFFER_LIMIT      │  a line longer than the buffer cap             │
    └────────────────────┴────────────────────────────────────────────────┘

scan_all_from_stream() keeps every field read before the stop and tells
the caller which of these happened, instead of collapsing them into
"stopped".

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..config import ScannerConfig
from ..errors import (
    BufferLimitExceeded,
    EndOfHeaderSequence,
    EndOfStream,
    HeaderScanError,
    InvalidHeader,
    UnreadFWSLine,
)
from .scanner import HeaderFieldScanner
from .value import HeaderFieldValue


logger = logging.getLogger(__name__)


Name = Union[bytes, str]


def _key(name: Name) -> bytes:
    # Text names are a convenience; header names are ASCII on the wire.
    if isinstance(name, str):
        return name.encode("latin-1")
    return bytes(name)


class Headers:
    """
    Field name → ordered list of values.

    Example:
        headers = Headers()
        headers.put(b"Accept", b"text/html")
        headers.put(b"Accept", b"text/plain")
        [v.unstructured for v in headers.get(b"Accept")]
        # [b"text/html", b"text/plain"]

    Not thread-safe.
    """

    def __init__(self):
        self._map: Dict[bytes, List[HeaderFieldValue]] = {}

    def put(self, name: Name, value: Union[HeaderFieldValue, bytes]) -> None:
        """Append ``value`` to the values of ``name``."""
        if not isinstance(value, HeaderFieldValue):
            value = HeaderFieldValue(value)
        self._map.setdefault(_key(name), []).append(value)

    set = put

    def get(self, name: Name) -> Optional[List[HeaderFieldValue]]:
        """All values of ``name`` in read order, or None if absent."""
        return self._map.get(_key(name))

    def first(self, name: Name) -> Optional[HeaderFieldValue]:
        """The first value of ``name``, or None if absent."""
        values = self.get(name)
        return values[0] if values else None

    def fields(self) -> Iterator[Tuple[bytes, HeaderFieldValue]]:
        """Yield every (name, value) pair, grouped by name."""
        for name, values in self._map.items():
            for value in values:
                yield name, value

    def names(self) -> List[bytes]:
        return list(self._map)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (bytes, bytearray, str)):
            return False
        return _key(name) in self._map

    def __len__(self) -> int:
        """Number of distinct names."""
        return len(self._map)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._map)

    def __repr__(self) -> str:
        return f"Headers({self._map!r})"

    @classmethod
    def from_stream(cls, source: Any, config: Optional[ScannerConfig] = None) -> "Headers":
        """
        Read a header block and return its fields.

        Raises:
            InvalidHeader, UnreadFWSLine, BufferLimitExceeded: The block is
                malformed.
        """
        result = scan_all_from_stream(source, config)
        result.raise_for_status()
        return result.headers


class ScanStatus(Enum):
    """Why scan_all_from_stream() stopped."""

    COMPLETE = "complete"
    END_OF_STREAM = "end_of_stream"
    INVALID_HEADER = "invalid_header"
    UNREAD_FWS_LINE = "unread_fws_line"
    BUFFER_LIMIT = "buffer_limit"

    @property
    def ok(self) -> bool:
        return self in (ScanStatus.COMPLETE, ScanStatus.END_OF_STREAM)


_STOP_STATUS = (
    (EndOfHeaderSequence, ScanStatus.COMPLETE),
    (EndOfStream, ScanStatus.END_OF_STREAM),
    (InvalidHeader, ScanStatus.INVALID_HEADER),
    (UnreadFWSLine, ScanStatus.UNREAD_FWS_LINE),
    (BufferLimitExceeded, ScanStatus.BUFFER_LIMIT),
)


@dataclass
class HeaderScanResult:
    """Fields read from one header block and why reading stopped."""

    headers: Headers
    status: ScanStatus
    error: Optional[HeaderScanError] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        """True if the block ended cleanly (blank line or end of stream)."""
        return self.status.ok

    def raise_for_status(self) -> None:
        """Re-raise the error that stopped the scan, unless it was clean."""
        if not self.ok and self.error is not None:
            raise self.error


def scan_all_from_stream(source: Any, config: Optional[ScannerConfig] = None) -> HeaderScanResult:
    """
    Read every field of a header block into a Headers collection.

    Reading stops at the blank line, at the end of the stream, or at the
    first malformed line. Fields read before the stop are kept.

    Args:
        source: Anything headerscan.core.source.as_source() accepts.
        config: Chunk size and buffer cap; delimiter is forced to CRLF.

    Returns:
        HeaderScanResult with the headers and a ScanStatus.
    """
    scanner = HeaderFieldScanner(source, config)
    headers = Headers()

    while True:
        try:
            name, value = scanner.scan_field()
        except HeaderScanError as e:
            status = _status_for(e)
            if status is None:
                raise
            error = e
            break

        headers.put(name, HeaderFieldValue(value))

    if status.ok:
        logger.debug(f"Header block ended ({status.value}) after {len(headers)} names")
    else:
        logger.warning(f"Header block stopped ({status.value}): {error}")

    return HeaderScanResult(headers=headers, status=status, error=error)


def _status_for(error: HeaderScanError) -> Optional[ScanStatus]:
    for error_type, status in _STOP_STATUS:
        if isinstance(error, error_type):
            return status
    return None
