"""
jsondb - Main entry point.

Starts the interactive shell:

    jsondb [--database PATH] [--log-level LEVEL] [--log-format text|json]

Configuration comes from JSONDB_* environment variables (see config.py);
command-line flags override them.

Invariants:
    - Logging is configured here and nowhere else
    - A --database that cannot be loaded exits with status 1 before the
      shell starts; errors inside the shell never exit the process
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

import json_log_formatter

from .config import Settings
from .database import Database
from .errors import JsonDbError
from .tools.shell import NAME, Shell, ShellContext

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings.

    Args:
        settings: Loaded settings
    """
    level = getattr(logging, settings.log_level.upper(), logging.WARNING)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # stderr, so log lines never mix with shell output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=NAME, description="jsondb interactive shell")
    parser.add_argument("--database", "-d", help="Database directory to load at start-up")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--log-format", choices=["text", "json"], help="Log output format")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    overrides = {
        key: value
        for key, value in {
            "database": args.database,
            "log_level": args.log_level,
            "log_format": args.log_format,
        }.items()
        if value is not None
    }
    settings = Settings(**overrides)
    setup_logging(settings)

    ctx = ShellContext(settings=settings)
    if settings.database:
        try:
            ctx.attach(
                Database.load(settings.database, **settings.store_options()),
                settings.database,
            )
        except JsonDbError as e:
            print(f"{NAME}: {e.message}", file=sys.stderr)
            return 1

    Shell().run(ctx)
    return 0


if __name__ == "__main__":
    sys.exit(main())
