"""
=============================================================================
FILESERVE CLI ENTRY POINT
=============================================================================

    # Serve ./public on http://127.0.0.1:9000
    python -m fileserve ./public

    # Another port, verbose logging (raw request and response heads)
    python -m fileserve ./public --port 8000 --log-level DEBUG

    # No per-connection deadline
    python -m fileserve ./public --timeout 0

The directory argument is required. Without it argparse prints the usage
line and exits with status 2 before any socket is created.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .server import FileServer
from .config import ServerConfig, LOG_LEVELS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fileserve",
        description="Serve the files of one directory over HTTP/1.1, one request per connection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fileserve ./public                    # http://127.0.0.1:9000
  fileserve ./public --port 8000        # Custom port
  fileserve ./public --log-level DEBUG  # Log raw heads
        """
    )

    parser.add_argument(
        "directory",
        help="Directory to serve files from"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=9000,
        help="Port to listen on (default: 9000)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=30.0,
        help="Per-connection socket deadline in seconds, 0 to disable (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--buffer-size", "-b",
        type=int,
        default=8196,
        help="Maximum request header size in bytes (default: 8196)"
    )

    parser.add_argument(
        "--allow-traversal",
        action="store_true",
        help="Do not refuse paths that resolve outside DIRECTORY (../, symlinks)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"fileserve {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Translate parsed CLI arguments to a ServerConfig."""
    return ServerConfig(
        root_dir=args.directory,
        strict_paths=not args.allow_traversal,
        host=args.host,
        port=args.port,
        timeout=args.timeout or None,
        buffer_size=args.buffer_size,
        log_level=args.log_level,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    try:
        server = FileServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
