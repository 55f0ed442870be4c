"""
=============================================================================
MINIHTTP CLI ENTRY POINT
=============================================================================

    # Serve the current directory on 127.0.0.1:8080
    python -m minihttp

    # Custom root and port
    python -m minihttp --root ./public --port 3000

    # Read settings from a specific config file
    python -m minihttp --config /etc/minihttp.toml

    # Dispatch on 4 worker threads
    python -m minihttp --workers 4

Configuration is assembled in order: defaults, then config.toml (if
present, or --config), then MINIHTTP_* environment variables, then flags.

Exit codes:
    0   server stopped cleanly
    1   server failed (bind failure, zero-byte read in "error" mode)
    2   configuration could not be loaded or is invalid

=============================================================================
"""

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from . import __version__
from .config import CONFIG_FILE_NAME, EMPTY_READ_ACTIONS, LOG_LEVELS, ServerConfig
from .errors import HTTPServerError
from .log import configure_logging
from .server import HTTPServer


logger = logging.getLogger("minihttp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal static-file HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttp                          # Serve ./ on 127.0.0.1:8080
  python -m minihttp --port 3000              # Custom port
  python -m minihttp --root ./public          # Serve another directory
  python -m minihttp --config site.toml       # Load a config file
        """,
    )

    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"TOML config file (default: ./{CONFIG_FILE_NAME} if it exists)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", default=None, help="Host to bind to")
    parser.add_argument("--port", "-p", type=int, default=None, help="Port to listen on")

    # ─────────────────────────────────────────────────────────────────────
    # SERVING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--root", "-r", default=None, help="Directory to serve")
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Worker threads for dispatch (0 = sequential)",
    )
    parser.add_argument(
        "--empty-read",
        dest="empty_read_action",
        choices=EMPTY_READ_ACTIONS,
        default=None,
        help="What a zero-byte request does to the server (default: error)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Console logging level (default: INFO)",
    )
    parser.add_argument("--log-file", default=None, help="Also log to this file")

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}",
    )

    return parser


def load_config(args: argparse.Namespace) -> ServerConfig:
    """
    Assemble configuration from file, environment and flags.

    Raises:
        ConfigReadError / ConfigParseError / ConfigValidationError
    """
    if args.config is not None:
        config = ServerConfig.from_toml(args.config)
    elif os.path.exists(CONFIG_FILE_NAME):
        config = ServerConfig.from_toml(CONFIG_FILE_NAME)
    else:
        config = ServerConfig()

    config = ServerConfig.from_env(config)
    config = config.merged(
        host=args.host,
        port=args.port,
        root=args.root,
        workers=args.workers,
        empty_read_action=args.empty_read_action,
        log_level=args.log_level,
        log_file=args.log_file,
    )
    config.validate()
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except HTTPServerError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(str(e))
        return 2

    configure_logging(config)

    try:
        HTTPServer(config).serve_forever()
    except HTTPServerError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
