#!/usr/bin/env python3
"""
Tierboard maintenance CLI

Usage:
    python -m tierboard.cli <command> [options]

Commands:
    db          Database operations (init, reset, status)
    points      Global points maintenance (recompute)
    kb          Support chat knowledge base (seed, list)
    auth        Admin panel credentials (set-password, clear-sessions)

Environment:
    DATABASE_URL    Async SQLAlchemy URL (default sqlite+aiosqlite:///./tierboard.db)
    LOG_LEVEL       DEBUG|INFO|WARNING|ERROR
"""
import argparse
import logging
import sys
from typing import Optional

from tierboard import __version__
from tierboard.cli.auth_commands import AuthCommand
from tierboard.cli.db_commands import DbCommand
from tierboard.cli.kb_commands import KbCommand
from tierboard.cli.points_commands import PointsCommand


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tierboard",
        description="Tierboard maintenance CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s db init
  %(prog)s points recompute --player-id 42
  %(prog)s kb seed
  %(prog)s auth clear-sessions
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without executing"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Database commands
    db_parser = subparsers.add_parser("db", help="Database operations")
    db_subparsers = db_parser.add_subparsers(dest="db_action")
    db_subparsers.add_parser("init", help="Create missing tables and seed auth config")
    reset_parser = db_subparsers.add_parser("reset", help="Drop and recreate every table")
    reset_parser.add_argument("--force", action="store_true", help="Skip confirmation")
    db_subparsers.add_parser("status", help="Connectivity and row counts")

    # Points commands
    points_parser = subparsers.add_parser("points", help="Global points maintenance")
    points_subparsers = points_parser.add_subparsers(dest="points_action")
    recompute_parser = points_subparsers.add_parser("recompute", help="Recompute global points")
    recompute_parser.add_argument("--player-id", type=int, help="Only this player")

    # Knowledge base commands
    kb_parser = subparsers.add_parser("kb", help="Support chat knowledge base")
    kb_subparsers = kb_parser.add_subparsers(dest="kb_action")
    kb_subparsers.add_parser("seed", help="Load the default FAQ entries")
    kb_list_parser = kb_subparsers.add_parser("list", help="List knowledge base entries")
    kb_list_parser.add_argument("--all", action="store_true", help="Include deactivated entries")

    # Auth commands
    auth_parser = subparsers.add_parser("auth", help="Admin panel credentials")
    auth_subparsers = auth_parser.add_subparsers(dest="auth_action")
    password_parser = auth_subparsers.add_parser("set-password", help="Rotate the owner or general password")
    password_parser.add_argument("which", choices=["owner", "general"])
    password_parser.add_argument("--password", help="New password (prompted when omitted)")
    auth_subparsers.add_parser("clear-sessions", help="Log out every admin")

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 1

    setup_logging(parsed.log_level)

    command_map = {
        "db": DbCommand,
        "points": PointsCommand,
        "kb": KbCommand,
        "auth": AuthCommand,
    }

    if parsed.command in command_map:
        handler = command_map[parsed.command](dry_run=parsed.dry_run)
        return handler.execute(parsed)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
