"""
Error types for the failover monitor.

This module defines all exception types raised by the archiver registry:
- ArchiverRegistryError: Base exception
- StorageFailureError: A statement did not execute as expected
- InvalidArgumentError: Missing or malformed input
- SchemaMismatchError: Caller's result shape does not fit the archiver row
- ArchiverNotFoundError: Removal targeted an archiver that does not exist

Invariants:
    - All errors inherit from ArchiverRegistryError
    - Errors carry a stable code for programmatic handling
    - Lookups never raise for a missing archiver, they return None
"""

from __future__ import annotations

from typing import Any


class ArchiverRegistryError(Exception):
    """Base exception for all archiver registry errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "REGISTRY_ERROR"
        self.details = details or {}


class StorageFailureError(ArchiverRegistryError):
    """The backing store could not run a statement.

    Raised when:
    - Database file or table is missing
    - A constraint is violated on insert
    - SQLite reports an I/O or locking failure
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        db_path: str | None = None,
    ) -> None:
        super().__init__(
            message,
            code="STORAGE_FAILURE",
            details={"operation": operation, "db_path": db_path},
        )
        self.operation = operation
        self.db_path = db_path


class InvalidArgumentError(ArchiverRegistryError):
    """A required input is missing or malformed."""

    def __init__(
        self,
        message: str,
        argument: str | None = None,
    ) -> None:
        super().__init__(
            message,
            code="INVALID_ARGUMENT",
            details={"argument": argument},
        )
        self.argument = argument


class SchemaMismatchError(ArchiverRegistryError):
    """The expected result shape is incompatible with the archiver row.

    Attributes:
        expected: Column types the archiver row provides
        actual: Column types the caller asked for
    """

    def __init__(
        self,
        message: str,
        expected: list[str] | None = None,
        actual: list[str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code="SCHEMA_MISMATCH",
            details={"expected": expected or [], "actual": actual or []},
        )
        self.expected = expected or []
        self.actual = actual or []


class ArchiverNotFoundError(ArchiverRegistryError):
    """No archiver exists with the given id."""

    def __init__(self, node_id: int) -> None:
        super().__init__(
            f"Archiver not found: {node_id}",
            code="NOT_FOUND",
            details={"node_id": node_id},
        )
        self.node_id = node_id
