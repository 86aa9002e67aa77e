"""
=============================================================================
DELIMITER SCANNER
=============================================================================

Turns a byte source into a sequence of delimiter-separated tokens.

=============================================================================
WHY IS THIS HARD?
=============================================================================

A source hands out bytes in chunks whose boundaries have nothing to do
with the records inside them:

    Stream:   "Subject: hi\\r\\nFrom: a@b\\r\\n\\r\\n"

        readinto() → "Subject: hi\\r"       (delimiter cut in half!)
        readinto() → "\\nFrom: a@"           (rest of delimiter + partial)
        readinto() → "b\\r\\n\\r\\n"            (two delimiters at once)

So the scanner must:

1. Keep bytes that were read but not yet returned (the CARRY BUFFER)
2. Search the WHOLE carry buffer, because a delimiter can straddle reads
3. Hand out one token per call even when one read produced several
4. Cap the carry buffer so input without delimiters can't eat memory
5. Flush the unterminated tail at end-of-stream

=============================================================================
CARRY BUFFER LAYOUT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         _buffer (bytearray)                         │
    ├──────────────────────────────────────┬──────────────────────────────┤
    │  valid, unconsumed bytes             │  unspecified (spare room)    │
    │  [0, _cursor)                        │  [_cursor, len(_buffer))     │
    └──────────────────────────────────────┴──────────────────────────────┘

Every time a token is cut, the bytes after the consumed delimiter are
moved to offset 0 in one slice assignment, so unconsumed data always
starts at the front.

=============================================================================
SCAN ALGORITHM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          scan() Flow                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ┌─────────────────────────────┐                                   │
    │   │ Delimiter in [0, _cursor)?  │── yes ──► cut token, compact      │
    │   └──────────────┬──────────────┘                                   │
    │                  │ no                                                │
    │                  ▼                                                   │
    │   ┌─────────────────────────────┐                                   │
    │   │ Source exhausted?           │── yes ──► flush tail or           │
    │   └──────────────┬──────────────┘           raise EndOfStream       │
    │                  │ no                                                │
    │                  ▼                                                   │
    │   readinto() up to the cap (1 byte if already there), append        │
    │                  │                                                   │
    │                  ▼                                                   │
    │   ┌─────────────────────────────┐                                   │
    │   │ Buffer over the cap?        │── yes ──► BufferLimitExceeded     │
    │   └──────────────┬──────────────┘                                   │
    │                  │ no, loop back to the top                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The loop is iterative: a long run without delimiters costs reads, not
stack frames.

=============================================================================
"""

import logging
from dataclasses import replace
from typing import Any, Iterator, Optional

from ..config import ScannerConfig
from ..errors import BufferLimitExceeded, EndOfStream, InsufficientData
from .source import as_source


logger = logging.getLogger(__name__)


class DelimiterScanner:
    """
    Splits a byte source into tokens separated by a delimiter.

    Example:
        scanner = DelimiterScanner(io.BytesIO(b"a\\nbb\\nccc"), delimiter=b"\\n")
        scanner.scan()   # b"a"
        scanner.scan()   # b"bb"
        scanner.scan()   # b"ccc"  (flushed at end-of-stream)
        scanner.scan()   # raises EndOfStream

    Keyword arguments override the matching fields of ``config``.

    A scanner owns its carry buffer and is not thread-safe: one consumer,
    one call at a time.
    """

    def __init__(
        self,
        source: Any,
        config: Optional[ScannerConfig] = None,
        **overrides: Any,
    ):
        config = replace(config or ScannerConfig(), **overrides)
        config.validate()
        self.config = config

        self._source = as_source(source)
        self._delimiter = bytes(config.delimiter)

        # Fixed transfer area handed to the source on every read
        self._chunk = memoryview(bytearray(config.chunk_size))

        self._buffer = bytearray()
        self._cursor = 0

        # Offsets below this were already searched without a match
        self._search_from = 0

        self._exhausted = False
        self.bytes_read = 0

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def delimiter(self) -> bytes:
        return self._delimiter

    @property
    def include_delimiter(self) -> bool:
        return self.config.include_delimiter

    @property
    def max_buffer_size(self) -> int:
        return self.config.max_buffer_size

    @property
    def buffered(self) -> int:
        """Number of bytes read from the source but not yet consumed."""
        return self._cursor

    @property
    def exhausted(self) -> bool:
        """True once the source has returned 0."""
        return self._exhausted

    # =========================================================================
    # SCANNING
    # =========================================================================

    def scan(self) -> bytes:
        """
        Return the next token.

        The token excludes the delimiter unless ``include_delimiter`` is
        set. The final token of a stream that does not end with the
        delimiter is returned as-is, with no delimiter.

        Returns:
            The next token (possibly empty).

        Raises:
            EndOfStream: The source is exhausted and nothing is buffered.
            BufferLimitExceeded: The record and its delimiter do not fit in
                ``max_buffer_size`` bytes.
        """
        while True:
            position = self._buffer.find(self._delimiter, self._search_from, self._cursor)
            if position != -1:
                return self._extract(position)

            # A delimiter straddling the end of the valid region can start
            # at most len(delimiter) - 1 bytes before it.
            self._search_from = max(0, self._cursor - len(self._delimiter) + 1)

            if self._exhausted or not self._fill():
                return self._flush()

    def peek(self, n: int) -> bytes:
        """
        Return the next ``n`` buffered bytes without consuming them.

        Only looks at bytes that are already in the carry buffer. It never
        reads from the source, so it can fail while the source still has
        data; scan() is what pulls more in.

        Raises:
            InsufficientData: Fewer than ``n`` bytes are buffered.
        """
        if n < 0:
            raise ValueError(f"peek size must be >= 0, got {n}")

        if n > self._cursor:
            raise InsufficientData(n, self._cursor)

        return bytes(self._buffer[:n])

    def drain(self) -> bytes:
        """
        Remove and return everything currently buffered.

        Used to resynchronize after BufferLimitExceeded. Does not read
        from the source.
        """
        data = bytes(self._buffer[:self._cursor])
        self._cursor = 0
        self._search_from = 0
        return data

    def __iter__(self) -> Iterator[bytes]:
        """Yield tokens until EndOfStream."""
        while True:
            try:
                yield self.scan()
            except EndOfStream:
                return

    # =========================================================================
    # CARRY BUFFER MANAGEMENT
    # =========================================================================

    def _fill(self) -> bool:
        """
        Read one chunk from the source into the carry buffer.

        Never reads more than the room left under ``max_buffer_size``.
        Once the buffer is at the cap, a single byte is read to tell a
        finished source from an oversized record.

        Returns:
            False if the source is exhausted.

        Raises:
            BufferLimitExceeded: The source had more data for a buffer that
                is already at the cap. The extra byte stays buffered.
        """
        limit = self.config.max_buffer_size
        if self._cursor > limit:
            # Still holding the overflow; drain() first
            raise BufferLimitExceeded(limit, self._cursor, self._delimiter)

        room = max(limit - self._cursor, 1)

        view = self._chunk[:min(room, len(self._chunk))]
        count = self._source.readinto(view) or 0

        if count == 0:
            self._exhausted = True
            logger.debug(f"Source exhausted after {self.bytes_read} bytes")
            return False

        end = self._cursor + count
        if end > len(self._buffer):
            # Grow geometrically, never past the cap plus the probe byte
            size = min(max(end, 2 * len(self._buffer)), limit + 1)
            self._buffer.extend(bytes(size - len(self._buffer)))

        self._buffer[self._cursor:end] = view[:count]
        self._cursor = end
        self.bytes_read += count

        if self._cursor > limit:
            logger.warning(
                f"Carry buffer over {limit} bytes "
                f"without delimiter {self._delimiter!r}"
            )
            raise BufferLimitExceeded(limit, self._cursor, self._delimiter)

        return True

    def _extract(self, position: int) -> bytes:
        """Cut the token ending at ``position`` and compact the buffer."""
        consumed = position + len(self._delimiter)
        token_end = consumed if self.config.include_delimiter else position
        token = bytes(self._buffer[:token_end])

        remaining = self._cursor - consumed
        self._buffer[:remaining] = self._buffer[consumed:self._cursor]
        self._cursor = remaining
        self._search_from = 0

        return token

    def _flush(self) -> bytes:
        """Return the unterminated tail at end-of-stream."""
        if self._cursor == 0:
            raise EndOfStream()

        token = bytes(self._buffer[:self._cursor])
        logger.debug(f"Flushing {len(token)} unterminated bytes at end of stream")

        self._cursor = 0
        self._search_from = 0
        return token


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# DelimiterScanner turns any readinto() source into tokens:
#
# 1. Carry buffer with a cursor, compacted in place on every token
# 2. Delimiter search over the whole unconsumed region (straddling safe)
# 3. Memory bounded by max_buffer_size
# 4. peek() for lookahead over already-buffered bytes only
# 5. Unterminated tail flushed once at end-of-stream
# =============================================================================
