"""
=============================================================================
HEADER FIELD VALUE
=============================================================================

A header value as read from the stream, plus an on-demand decode into
semicolon-separated parameters.

=============================================================================
STRUCTURED VALUES
=============================================================================

    Content-Type: text/plain; size="1024909"; name="wololo.txt"
                  ────┬───── ───────┬─────── ─────────┬────────
                      │             │                 │
                  keyless       key=value         key=value
                  segment

    decodes to:

        {
            b"\\x00": b"text/plain",         ← synthetic positional key
            b"size": b'"1024909"',           ← quotes kept verbatim
            b"name": b'"wololo.txt"',
        }

Rules:

1. No "=" anywhere in the value → NotAStructuredField
2. Split on ";", skipping spaces/tabs right after each ";"
3. Split each segment on its FIRST "=" into key and value
4. A segment without "=" is keyed by a single byte holding its index
   among the keyless segments so far: b"\\x00", b"\\x01", ...
5. More than 256 keyless segments → TooManyPositionalParameters

=============================================================================
KNOWN AMBIGUITY
=============================================================================

Positional keys share the key space with textual keys. A parameter whose
name is literally b"\\x00" collides with the first keyless segment, and the
later one wins. Keys are compared as raw bytes; nothing is unquoted,
lowercased or validated.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..errors import NotAStructuredField, TooManyPositionalParameters
from .scanner import lstrip_whitespace


PARAMETER_SEPARATOR = b";"
KEY_VALUE_SEPARATOR = b"="
MAX_POSITIONAL_KEYS = 256


def positional_key(index: int) -> bytes:
    """Synthetic key for the ``index``-th keyless segment."""
    return bytes([index])


@dataclass(frozen=True)
class HeaderFieldValue:
    """
    One raw header value.

    ``unstructured`` never changes after construction, so the decoded
    parameters are computed once and cached.
    """

    unstructured: bytes

    _structured: Optional[Dict[bytes, bytes]] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "unstructured", bytes(self.unstructured))

    @property
    def is_structured(self) -> bool:
        """True if the value carries at least one ``=``."""
        return KEY_VALUE_SEPARATOR in self.unstructured

    def as_structured(self) -> Dict[bytes, bytes]:
        """
        Decode the value into its parameters.

        Lazy evaluation with caching: the first successful call decodes,
        later calls return the same mapping.

        Returns:
            Mapping of parameter key to raw parameter value.

        Raises:
            NotAStructuredField: The value contains no ``=``.
            TooManyPositionalParameters: More than 256 segments have no
                ``=``.
        """
        if self._structured is not None:
            return self._structured

        if not self.is_structured:
            raise NotAStructuredField(
                f"Value has no parameters: {self.unstructured!r}", self.unstructured
            )

        object.__setattr__(self, "_structured", self._decode())
        return self._structured

    def _decode(self) -> Dict[bytes, bytes]:
        parameters: Dict[bytes, bytes] = {}
        keyless = 0

        data = self.unstructured
        start = 0
        while start < len(data):
            end = data.find(PARAMETER_SEPARATOR, start)
            if end == -1:
                end = len(data)

            segment = data[start:end]
            key, separator, value = segment.partition(KEY_VALUE_SEPARATOR)
            if separator:
                parameters[key] = value
            else:
                if keyless == MAX_POSITIONAL_KEYS:
                    raise TooManyPositionalParameters(
                        f"More than {MAX_POSITIONAL_KEYS} keyless parameters",
                        data,
                        MAX_POSITIONAL_KEYS,
                    )
                parameters[positional_key(keyless)] = segment
                keyless += 1

            if end == len(data):
                break

            # Skip the separator and any whitespace after it
            rest = lstrip_whitespace(data[end + 1:])
            start = len(data) - len(rest)

        return parameters

    def __bytes__(self) -> bytes:
        return self.unstructured
