"""
=============================================================================
HTTP SERVER CLI ENTRY POINT
=============================================================================

Command-line interface for running the server.

=============================================================================
USAGE
=============================================================================

    # Run with defaults (127.0.0.1:4221, files from the current directory)
    python -m minihttp

    # Serve /files/{name} from a specific directory
    python -m minihttp --directory /tmp/files

    # Listen on all interfaces, custom port
    python -m minihttp --host 0.0.0.0 --port 8080

    # Drop clients that stall for more than 10 seconds
    python -m minihttp --timeout 10

Every option falls back to its HTTP_* environment variable (see
config.py), then to the built-in default.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .server import HTTPServer
from .config import ServerConfig, LOG_LEVELS


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Create the argument parser, with defaults taken from `defaults`."""
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal HTTP/1.1 server: echo, user-agent and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                          # Run with defaults
  python -m minihttp --port 3000              # Custom port
  python -m minihttp --directory /tmp/files   # Root for /files/{name}
  python -m minihttp --log-level DEBUG        # Verbose logging
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout,
        help="Per-connection socket timeout in seconds (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=defaults.directory,
        help=f"Root directory for /files/{{name}} (default: {defaults.directory})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level,
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--no-access-log",
        dest="access_log",
        action="store_false",
        help="Do not log a line per request"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None):
    """
    Main CLI entry point.

    Exits with status 1 if the server cannot bind its address, and
    with argparse's status 2 on invalid options.
    """
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid HTTP_* environment variable: {e}", file=sys.stderr)
        sys.exit(2)

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        directory=args.directory,
        backlog=defaults.backlog,
        buffer_size=defaults.buffer_size,
        timeout=args.timeout,
        log_level=args.log_level,
        access_log=args.access_log,
    )

    try:
        server = HTTPServer(config)
    except ValueError as e:
        parser.error(str(e))

    # =========================================================================
    # RUN SERVER
    # =========================================================================
    # Blocks until Ctrl+C / SIGTERM

    try:
        server.run()
    except OSError as e:
        print(f"Error: cannot listen on {config.host}:{config.port}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
