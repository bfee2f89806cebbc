"""
Taskboard CLI — Command-Line Entry Point
==========================================

Usage:
    # Start the server (settings from TASKBOARD_* env vars, flags win)
    taskboard start --port 8080

    # Print the installed version
    taskboard version
"""

from __future__ import annotations

import argparse
import sys

from taskboard import __version__
from taskboard.config import ServerConfig
from taskboard.witness import setup_logging


# ─────────────────────────────────────────────────────────────
#  Helpers
# ─────────────────────────────────────────────────────────────

def build_config(args) -> ServerConfig:
    """Environment config with any explicit CLI flags applied on top."""
    config = ServerConfig.from_env()
    if getattr(args, "host", None):
        config.host = args.host
    if getattr(args, "port", None) is not None:
        config.port = args.port
    if getattr(args, "log_level", None):
        config.log_level = args.log_level.upper()
    if getattr(args, "no_legacy", False):
        config.legacy_routes = False
    return config


# ─────────────────────────────────────────────────────────────
#  Commands
# ─────────────────────────────────────────────────────────────

def cmd_start(args):
    """Launch the HTTP server."""
    try:
        import uvicorn  # noqa: F401
    except ImportError:
        print("✘ uvicorn is required to run the server.")
        print("  Install it with:  pip install uvicorn fastapi")
        return 1

    config = build_config(args)
    setup_logging(config.log_level)

    from taskboard.server import run_server
    run_server(config)
    return 0


def cmd_version(args):
    print(f"taskboard {__version__}")
    return 0


# ─────────────────────────────────────────────────────────────
#  Main
# ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskboard",
        description="Taskboard — in-memory to-do service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  taskboard start\n"
            "  taskboard start --host 0.0.0.0 --port 9000 --log-level debug\n"
            "  taskboard version\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    p_start = subparsers.add_parser("start", help="Start the HTTP server")
    p_start.add_argument("--host", default=None, help="Bind address (default: 127.0.0.1)")
    p_start.add_argument("--port", default=None, type=int, help="Port number (default: 8080)")
    p_start.add_argument("--log-level", default=None,
                         help="Logging level: debug, info, warning, error")
    p_start.add_argument("--no-legacy", action="store_true",
                         help="Don't serve the /api/todos routes")

    subparsers.add_parser("version", help="Show the version")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "start": cmd_start,
        "version": cmd_version,
    }

    if args.command in commands:
        return commands[args.command](args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
