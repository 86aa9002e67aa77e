"""
Core scanning layer: byte sources and the delimiter scanner.
"""

from .scanner import DelimiterScanner
from .source import ByteSource, IterableSource, SocketSource, as_source

__all__ = [
    "DelimiterScanner",
    "ByteSource",
    "IterableSource",
    "SocketSource",
    "as_source",
]
