"""
CLI tools for failover monitor administration.

This module provides command-line tools for:
- archiver: Register, inspect and remove archiver nodes

Invariants:
    - Tools work offline (no running monitor required)
    - All operations are logged for audit
"""

from .archiver_cli import ArchiverCLI, build_parser

__all__ = ["ArchiverCLI", "build_parser"]
