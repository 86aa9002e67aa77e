"""
=============================================================================
SCANNER CONFIGURATION
=============================================================================

Centralized configuration for the delimiter scanner and everything built
on top of it.

=============================================================================
WHAT CAN BE CONFIGURED?
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    SCANNER SETTINGS                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   delimiter           b"\\n"      bytes that separate records        │
    │   include_delimiter   False      keep the delimiter on each token   │
    │   chunk_size          1024       bytes requested per source read    │
    │   max_buffer_size     64 KiB     cap on bytes held without a match  │
    │   log_level           WARNING    used by the CLI logging setup      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The header scanner always splits on CRLF and never keeps the delimiter;
``for_headers()`` returns a copy with those two fields forced.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    HEADERSCAN_CHUNK_SIZE        Read chunk size in bytes
    HEADERSCAN_MAX_BUFFER_SIZE   Carry buffer cap in bytes
    HEADERSCAN_LOG_LEVEL         Logging level for the CLI

=============================================================================
"""

import os
from dataclasses import dataclass, replace


CRLF = b"\r\n"

DEFAULT_CHUNK_SIZE = 1024
DEFAULT_MAX_BUFFER_SIZE = 64 * 1024


@dataclass
class ScannerConfig:
    """
    Configuration for a DelimiterScanner.

    =========================================================================
    MEMORY BOUND
    =========================================================================

    The carry buffer holds bytes that were read but not yet returned as a
    token. When the delimiter never shows up it would grow forever, so
    it is capped at ``max_buffer_size``. Reaching the cap without a
    delimiter raises BufferLimitExceeded.

        Development:
            ScannerConfig(delimiter=b"\\n", chunk_size=4)   # tiny reads

        Production:
            ScannerConfig(delimiter=b"\\r\\n", chunk_size=8192,
                          max_buffer_size=1024 * 1024)

    =========================================================================
    """

    delimiter: bytes = b"\n"
    """Byte sequence separating records. Must not be empty."""

    include_delimiter: bool = False
    """Return tokens with their trailing delimiter attached."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    """
    Size of the transfer area handed to the source on every read.
    Smaller chunks mean more reads, larger ones more memory per scanner.
    """

    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE
    """
    Maximum number of bytes the carry buffer may hold without finding a
    delimiter. Protects against input that never contains one.
    """

    log_level: str = "WARNING"
    """Logging level (DEBUG, INFO, WARNING, ERROR) for the CLI."""

    @classmethod
    def from_env(cls) -> "ScannerConfig":
        """
        Create configuration from environment variables.

        Usage:
            HEADERSCAN_CHUNK_SIZE=16 python -m headerscan message.eml
        """
        return cls(
            chunk_size=int(os.getenv("HEADERSCAN_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
            max_buffer_size=int(
                os.getenv("HEADERSCAN_MAX_BUFFER_SIZE", str(DEFAULT_MAX_BUFFER_SIZE))
            ),
            log_level=os.getenv("HEADERSCAN_LOG_LEVEL", "WARNING"),
        )

    def for_headers(self) -> "ScannerConfig":
        """Copy of this config with the header line delimiter forced."""
        return replace(self, delimiter=CRLF, include_delimiter=False)

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by the scanners at construction so a bad config fails
        before the first read, not in the middle of a stream.
        """
        if not isinstance(self.delimiter, (bytes, bytearray)):
            raise ValueError(f"delimiter must be bytes, got {type(self.delimiter).__name__}")

        if not self.delimiter:
            raise ValueError("delimiter must not be empty")

        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")

        if self.max_buffer_size < len(self.delimiter):
            raise ValueError(
                f"max_buffer_size must be >= len(delimiter) ({len(self.delimiter)})"
            )
