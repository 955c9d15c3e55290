"""
=============================================================================
COMMAND LINE INTERFACE
=============================================================================

    python -m minihttp                        # port 4221, serve "."
    python -m minihttp --port 3000            # custom port
    python -m minihttp --directory /srv/files # where /file/{name} reads from
    minihttp -l DEBUG                         # console script, verbose

Precedence: command-line flag > MINIHTTP_* environment variable > default.

Exit codes:
    0   stopped by SIGINT/SIGTERM
    1   invalid configuration, or the socket could not be set up

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .errors import SocketSetupError
from .server import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal concurrent HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                        # Run with defaults (port 4221)
  python -m minihttp --port 3000            # Custom port
  python -m minihttp --directory ./public   # Serve /file/ from ./public
  python -m minihttp --max-connections 64   # Cap concurrent connections
        """
    )

    # Every default is None so unset flags fall through to the environment

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: 4221)")
    parser.add_argument("--backlog", type=int, help="Listen backlog (default: 5)")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-connection socket timeout in seconds (default: none)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # SERVING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        help="Directory that /file/{name} is served from (default: .)",
    )
    parser.add_argument(
        "--max-connections",
        type=int,
        help="Maximum connections handled at once (default: unlimited)",
    )
    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: INFO)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--version", "-v", action="version", version=f"minihttp {__version__}")

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-based config with every flag that was given applied on top."""
    config = ServerConfig.from_env()

    for field_name in (
        "host", "port", "backlog", "timeout", "directory", "max_connections", "log_level",
    ):
        value = getattr(args, field_name)
        if value is not None:
            setattr(config, field_name, value)

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = create_app(config)  # validates the config
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except SocketSetupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
