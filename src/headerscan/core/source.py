"""
=============================================================================
BYTE SOURCES
=============================================================================

The scanners never open files or sockets themselves. They pull bytes from
a *source*: any object with a blocking ``readinto``:

    readinto(buffer) -> number of bytes written into buffer
                        0 means the source is exhausted, for good

This is exactly the ``io.RawIOBase`` contract, so files opened in binary
mode, ``io.BytesIO`` and ``sys.stdin.buffer`` work as they are. This
module adapts the other common shapes:

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │  Input               │  Adapter                                     │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │  has .readinto()     │  used directly                               │
    │  bytes / bytearray   │  io.BytesIO                                  │
    │  socket.socket       │  SocketSource (recv_into)                    │
    │  iterable of bytes   │  IterableSource (generators, response bodies)│
    └──────────────────────┴──────────────────────────────────────────────┘

A source that returns 0 is never read again. There is no distinction
between "no data right now" and "no data ever".

=============================================================================
"""

import io
import logging
import socket
from typing import Any, Iterable, Iterator, Optional, Protocol


logger = logging.getLogger(__name__)


class ByteSource(Protocol):
    """Anything that can fill a writable buffer with bytes."""

    def readinto(self, buffer: Any) -> Optional[int]:
        ...


class IterableSource:
    """
    Adapts an iterable of byte chunks to the readinto() contract.

    A chunk larger than the caller's buffer is handed out over several
    calls. Empty chunks are skipped: only the end of the iterator means
    the source is exhausted.

    Example:
        def chunks():
            yield b"Subject: hi\\r"
            yield b"\\n\\r\\n"

        source = IterableSource(chunks())
    """

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks: Iterator[bytes] = iter(chunks)
        self._pending = memoryview(b"")

    def readinto(self, buffer: Any) -> int:
        view = memoryview(buffer).cast("B")

        while not self._pending:
            try:
                self._pending = memoryview(bytes(next(self._chunks)))
            except StopIteration:
                return 0

        count = min(len(view), len(self._pending))
        view[:count] = self._pending[:count]
        self._pending = self._pending[count:]
        return count


class SocketSource:
    """
    Adapts a connected socket to the readinto() contract.

    A reset or broken connection is reported as exhaustion (0), the same
    way a clean shutdown by the peer is. Timeouts are not handled here:
    a blocking socket without a timeout blocks the scanner indefinitely.
    """

    def __init__(self, sock: socket.socket):
        self.socket = sock

    def readinto(self, buffer: Any) -> int:
        try:
            return self.socket.recv_into(buffer)
        except (ConnectionResetError, BrokenPipeError) as e:
            # Peer went away; nothing more will arrive.
            logger.debug(f"Socket closed while reading: {e}")
            return 0


def as_source(obj: Any) -> ByteSource:
    """
    Return a readinto() source for ``obj``.

    Raises:
        TypeError: If ``obj`` cannot be adapted.
    """
    if hasattr(obj, "readinto"):
        return obj

    if isinstance(obj, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(obj))

    if isinstance(obj, socket.socket):
        return SocketSource(obj)

    if isinstance(obj, str):
        raise TypeError("Text is not a byte source; encode it first")

    try:
        return IterableSource(obj)
    except TypeError:
        raise TypeError(f"Cannot read bytes from {type(obj).__name__}") from None
