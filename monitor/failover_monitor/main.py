"""
Failover Monitor - entry point for the archiver administration tool.

This module wires configuration, logging and the archiver store together
and dispatches one CLI command.

Usage:
    python -m failover_monitor.main list

Configuration is entirely via MONITOR_* environment variables.
See config.py for all available settings.

Invariants:
    - Logging is configured before the store is touched
    - Registry errors are reported on stderr with exit code 1
"""

from __future__ import annotations

import argparse
import logging
import sys

import json_log_formatter
from pydantic import ValidationError

from .config import MonitorSettings
from .errors import ArchiverRegistryError
from .metadata import ArchiverStore
from .tools import ArchiverCLI, build_parser

logger = logging.getLogger(__name__)


def setup_logging(settings: MonitorSettings) -> None:
    """Configure logging based on settings.

    Args:
        settings: Monitor settings
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]


def run_command(cli: ArchiverCLI, args: argparse.Namespace) -> int:
    """Run one parsed command against the store.

    Returns:
        Process exit code
    """
    try:
        if args.command == "init":
            print(cli.init())

        elif args.command == "add":
            print(cli.add(args.host, args.name))

        elif args.command == "get":
            output = cli.get(args.node_id)
            if output is None:
                print(f"Archiver not found: {args.node_id}", file=sys.stderr)
                return 1
            print(output)

        elif args.command == "remove":
            cli.remove(args.node_id)
            print(f"Removed archiver {args.node_id}", file=sys.stderr)

        elif args.command == "list":
            print(cli.list())

    except ArchiverRegistryError as e:
        print(f"{e.code}: {e.message}", file=sys.stderr)
        return 1

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    overrides = {"data_dir": args.data_dir} if args.data_dir else {}
    try:
        settings = MonitorSettings(**overrides)
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)
    settings.log_config()

    cli = ArchiverCLI(ArchiverStore.from_settings(settings))
    return run_command(cli, args)


if __name__ == "__main__":
    sys.exit(main())
