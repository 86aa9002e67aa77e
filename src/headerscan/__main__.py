"""
=============================================================================
HEADERSCAN CLI ENTRY POINT
=============================================================================

Command-line front end for the scanners.

=============================================================================
USAGE
=============================================================================

    # Print the header fields of a message
    python -m headerscan message.eml

    # Also decode parameterized values (Content-Type, Content-Disposition)
    python -m headerscan message.eml --structured

    # Read from stdin
    cat message.eml | python -m headerscan

    # Split any file on a delimiter instead of parsing headers
    python -m headerscan data.txt --tokens --delimiter ';;'

    # Tiny reads, to watch delimiters straddle chunk boundaries
    python -m headerscan message.eml --chunk-size 3 --log-level DEBUG

=============================================================================
EXIT STATUS
=============================================================================

    0   header block ended cleanly (blank line or end of input)
    1   malformed header block, or a record longer than the buffer cap
    2   bad command-line arguments (argparse)

=============================================================================
"""

import argparse
import logging
import sys
from typing import BinaryIO, Optional, Sequence

from . import __version__
from .config import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_BUFFER_SIZE, ScannerConfig
from .core.scanner import DelimiterScanner
from .errors import BufferLimitExceeded, NotAStructuredField, TooManyPositionalParameters
from .header.collection import scan_all_from_stream


logger = logging.getLogger("headerscan")


def setup_logging(level: str) -> None:
    """Configure logging for command-line use."""
    numeric = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("headerscan").setLevel(numeric)


def parse_delimiter(text: str) -> bytes:
    """
    Turn a command-line delimiter into bytes.

    Backslash escapes are honoured, so '\\r\\n' on the command line means
    CR LF.
    """
    delimiter = text.encode("latin-1").decode("unicode_escape").encode("latin-1")
    if not delimiter:
        raise argparse.ArgumentTypeError("delimiter must not be empty")
    return delimiter


def _text(data: bytes) -> str:
    # Every byte maps to one character, so nothing is lost or rejected
    return data.decode("latin-1")


def build_parser() -> argparse.ArgumentParser:
    # Environment variables provide the defaults, flags override them
    defaults = ScannerConfig.from_env()

    parser = argparse.ArgumentParser(
        prog="headerscan",
        description="Scan delimiter-separated records and folded header blocks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m headerscan message.eml                   # Print header fields
  python -m headerscan message.eml --structured      # Decode parameters
  python -m headerscan data.txt --tokens -d ';;'     # Split on ';;'
        """
    )

    parser.add_argument(
        "file",
        nargs="?",
        default="-",
        help="File to read (default: stdin)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # MODE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--tokens", "-t",
        action="store_true",
        help="Print delimiter-separated tokens instead of header fields"
    )

    parser.add_argument(
        "--delimiter", "-d",
        type=parse_delimiter,
        default=b"\n",
        help="Token delimiter for --tokens, escapes allowed (default: \\n)"
    )

    parser.add_argument(
        "--include-delimiter",
        action="store_true",
        help="Keep the delimiter at the end of each token"
    )

    parser.add_argument(
        "--structured", "-s",
        action="store_true",
        help="Also print decoded parameters of structured header values"
    )

    # ─────────────────────────────────────────────────────────────────────
    # BUFFER ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--chunk-size",
        type=int,
        default=defaults.chunk_size,
        help=f"Bytes requested per read (default: {DEFAULT_CHUNK_SIZE})"
    )

    parser.add_argument(
        "--max-buffer-size",
        type=int,
        default=defaults.max_buffer_size,
        help=f"Carry buffer cap in bytes (default: {DEFAULT_MAX_BUFFER_SIZE})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=defaults.log_level.upper(),
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"headerscan {__version__}"
    )

    return parser


def print_tokens(stream: BinaryIO, config: ScannerConfig) -> int:
    scanner = DelimiterScanner(stream, config)
    try:
        for token in scanner:
            print(_text(token))
    except BufferLimitExceeded as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def print_headers(stream: BinaryIO, config: ScannerConfig, structured: bool) -> int:
    result = scan_all_from_stream(stream, config)

    for name, value in result.headers.fields():
        print(f"{_text(name)}: {_text(value.unstructured)}")

        if not structured:
            continue
        try:
            parameters = value.as_structured()
        except NotAStructuredField:
            continue
        except TooManyPositionalParameters as e:
            logger.warning(f"Skipping parameters of {_text(name)}: {e}")
            continue
        for key, parameter in parameters.items():
            label = f"[{key[0]}]" if len(key) == 1 and key[0] < 0x20 else _text(key)
            print(f"    {label} = {_text(parameter)}")

    if not result.ok:
        print(f"Error: {result.status.value}: {result.error}", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns the process exit status.
    """
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)

    # =========================================================================
    # CREATE CONFIGURATION
    # =========================================================================

    config = ScannerConfig(
        delimiter=args.delimiter,
        include_delimiter=args.include_delimiter,
        chunk_size=args.chunk_size,
        max_buffer_size=args.max_buffer_size,
        log_level=args.log_level,
    )
    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    # =========================================================================
    # RUN
    # =========================================================================

    if args.file == "-":
        stream = sys.stdin.buffer
        logger.debug("Reading from stdin")
        if args.tokens:
            return print_tokens(stream, config)
        return print_headers(stream, config, args.structured)

    try:
        with open(args.file, "rb") as stream:
            if args.tokens:
                return print_tokens(stream, config)
            return print_headers(stream, config, args.structured)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    sys.exit(main())
