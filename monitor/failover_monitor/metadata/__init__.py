"""
Metadata module for the failover monitor - archiver registry.

This module handles:
- The archiver table and its id sequence (SQLite)
- Atomic archiver registration with default naming
- Shaping archiver records into caller-typed rows

Invariants:
    - Archiver ids are allocated by the database, never in process
    - Every write is a single transaction; failures leave no partial rows
    - Lookups of unknown ids return None rather than raising

How to change safely:
    - Keep the (id, name, host) row order stable for callers
    - Test concurrent registration after touching add_archiver
"""

from .archiver_store import (
    ARCHIVER_SEQUENCE,
    ARCHIVER_TABLE,
    ArchiverNode,
    ArchiverStore,
    default_archiver_name,
)
from .row_shape import (
    ARCHIVER_ROW_DESCRIPTOR,
    ColumnDescriptor,
    ResultDescriptor,
    ResultKind,
    archiver_to_row,
)

__all__ = [
    "ARCHIVER_SEQUENCE",
    "ARCHIVER_TABLE",
    "ArchiverNode",
    "ArchiverStore",
    "default_archiver_name",
    "ARCHIVER_ROW_DESCRIPTOR",
    "ColumnDescriptor",
    "ResultDescriptor",
    "ResultKind",
    "archiver_to_row",
]
