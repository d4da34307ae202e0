"""
Archiver administration CLI for the failover monitor.

This tool manages the archiver registry offline:
- init: Create the monitor database and archiver sequence
- add: Register an archiver and print its id
- get: Print one archiver as a row keyed by column name
- remove: Remove an archiver by id
- list: Print every archiver

Usage:
    failover-monitor-archiver init
    failover-monitor-archiver add --host 10.0.0.1 [--name archiver_a]
    failover-monitor-archiver get 1
    failover-monitor-archiver remove 1
    failover-monitor-archiver list

Invariants:
    - Output on stdout is JSON, diagnostics go to stderr
    - A missing archiver or a registry error gives exit code 1
    - Rows printed by get follow ARCHIVER_ROW_DESCRIPTOR column order
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from typing import Any

from ..metadata import ARCHIVER_ROW_DESCRIPTOR, ArchiverStore, archiver_to_row


class ArchiverCLI:
    """Commands of the archiver administration tool.

    Example:
        >>> cli = ArchiverCLI(ArchiverStore("/var/lib/failover-monitor"))
        >>> cli.add("10.0.0.1")
        '{"nodeid": 1}'
    """

    def __init__(self, store: ArchiverStore) -> None:
        self.store = store

    def init(self) -> str:
        self.store.initialize()
        return json.dumps({"db_path": str(self.store.db_path)})

    def add(self, node_host: str, node_name: str | None = None) -> str:
        node_id = self.store.add_archiver(node_name, node_host)
        return json.dumps({"nodeid": node_id})

    def get(self, node_id: int) -> str | None:
        """Render an archiver as a JSON row.

        Returns:
            JSON object keyed by column name, or None if not found
        """
        archiver = self.store.get_archiver(node_id)
        if archiver is None:
            return None

        row = archiver_to_row(archiver, ARCHIVER_ROW_DESCRIPTOR)
        return json.dumps(dict(zip(ARCHIVER_ROW_DESCRIPTOR.column_names, row)))

    def remove(self, node_id: int) -> None:
        self.store.remove_archiver(node_id)

    def list(self) -> str:
        archivers: list[dict[str, Any]] = [
            asdict(archiver) for archiver in self.store.list_archivers()
        ]
        return json.dumps(archivers, indent=2)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the archiver tool."""
    parser = argparse.ArgumentParser(description="Failover monitor archiver registry tool")
    parser.add_argument("--data-dir", help="Directory of the monitor database (overrides env)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="Create the monitor database")

    add_parser = subparsers.add_parser("add", help="Register an archiver")
    add_parser.add_argument("--host", required=True, help="Host address of the archiver")
    add_parser.add_argument("--name", help="Archiver name (default: archiver_<id>)")

    get_parser = subparsers.add_parser("get", help="Show an archiver")
    get_parser.add_argument("node_id", type=int, help="Archiver id")

    remove_parser = subparsers.add_parser("remove", help="Remove an archiver")
    remove_parser.add_argument("node_id", type=int, help="Archiver id")

    subparsers.add_parser("list", help="List all archivers")

    return parser
